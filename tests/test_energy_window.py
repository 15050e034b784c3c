import pytest

from meteodetect.dsp.integral import EnergyWindow


def test_push_returns_sum_and_oldest_slot() -> None:
    window = EnergyWindow(3)
    assert window.push(1.0) == (1.0, 1)
    assert window.push(2.0) == (3.0, 2)
    assert window.push(3.0) == (6.0, 0)
    integral, slot = window.push(4.0)
    assert integral == 9.0
    assert slot == 1
    assert list(window.values) == [4.0, 2.0, 3.0]


def test_incremental_sum_tracks_full_resum() -> None:
    full = EnergyWindow(5)
    running = EnergyWindow(5, incremental=True)
    for i in range(23):
        ratio = 0.25 * ((i * 7) % 11)
        a, slot_a = full.push(ratio)
        b, slot_b = running.push(ratio)
        assert slot_a == slot_b
        assert b == pytest.approx(a, abs=1e-12)


def test_single_slot_window() -> None:
    window = EnergyWindow(1)
    assert window.push(2.5) == (2.5, 0)
    assert window.push(0.5) == (0.5, 0)


def test_rejects_empty_window() -> None:
    with pytest.raises(ValueError):
        EnergyWindow(0)
