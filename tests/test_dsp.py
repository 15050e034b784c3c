import numpy as np
import pytest

from meteodetect.config import DetectorConfig
from meteodetect.dsp.demod import OutputCompositor
from meteodetect.dsp.estimator import PowerEstimator
from meteodetect.dsp.filters import LowPassStage
from meteodetect.dsp.integral import EnergyWindow
from meteodetect.dsp.oscillator import LocalOscillator

FS = 8000.0
FC = 1000.0


def _estimator(cfg: DetectorConfig = DetectorConfig()) -> PowerEstimator:
    return PowerEstimator(
        LocalOscillator(cfg.lo_frequency_norm),
        LowPassStage(cfg.wide_order, cfg.wide_cutoff_norm),
        LowPassStage(cfg.narrow_order, cfg.narrow_cutoff_norm),
        cfg.alpha,
    )


def _tone(n: int, freq: float, amplitude: float = 1.0) -> np.ndarray:
    k = np.arange(n)
    return amplitude * np.exp(2j * np.pi * freq * k / FS)


def test_oscillator_phasors_are_unit_and_rotate() -> None:
    lo = LocalOscillator(0.125)
    block = lo.read_block(16)
    assert np.allclose(np.abs(block), 1.0)
    assert block[0] == pytest.approx(1.0 + 0.0j)
    assert np.allclose(block[1:] / block[:-1], np.exp(2j * np.pi * 0.125))
    assert lo.index == 16


def test_oscillator_single_reads_match_block() -> None:
    single = LocalOscillator(0.0371)
    block = LocalOscillator(0.0371).read_block(50)
    assert np.allclose(np.array([single.read() for _ in range(50)]), block, rtol=0.0, atol=1e-12)


def test_lowpass_has_unity_dc_gain() -> None:
    stage = LowPassStage(4, 0.0125)
    out = stage.feed_block(np.ones(8000, dtype=np.complex128))
    assert out[-1] == pytest.approx(1.0 + 0.0j, abs=1e-6)


def test_lowpass_state_carries_across_calls() -> None:
    rng = np.random.default_rng(7)
    x = rng.standard_normal(300) + 1j * rng.standard_normal(300)
    whole = LowPassStage(5, 0.075).feed_block(x)
    stage = LowPassStage(5, 0.075)
    parts = np.concatenate([stage.feed_block(x[:123]), np.array([stage.feed(x[123])]), stage.feed_block(x[124:])])
    assert np.allclose(whole, parts)


@pytest.mark.parametrize("cutoff", [0.0, 1.0, 1.5])
def test_lowpass_rejects_bad_cutoff(cutoff: float) -> None:
    with pytest.raises(ValueError):
        LowPassStage(4, cutoff)


def test_estimator_all_zero_input_yields_zero_ratio() -> None:
    est = _estimator()
    ratios, demods = est.estimate_block(np.zeros(64, dtype=np.complex128))
    assert not np.any(np.isnan(ratios))
    assert np.all(ratios == 0.0)
    assert np.all(demods == 0.0)
    assert est.noise_power == 0.0


def test_estimator_tone_at_center_drives_ratio_to_one() -> None:
    est = _estimator()
    ratios, _ = est.estimate_block(_tone(8000, FC))
    assert ratios[-1] == pytest.approx(1.0, abs=0.05)
    assert est.signal_power == pytest.approx(est.noise_power, rel=0.05)


def test_estimator_off_center_tone_is_rejected() -> None:
    est = _estimator()
    ratios, _ = est.estimate_block(_tone(8000, FC + 1500.0))
    assert ratios[-1] < 0.05


def test_estimator_scalar_matches_block() -> None:
    rng = np.random.default_rng(11)
    x = (rng.standard_normal(200) + 1j * rng.standard_normal(200)) * 0.1 + _tone(200, FC)
    block_ratios, block_demods = _estimator().estimate_block(x)
    est = _estimator()
    pairs = [est.estimate(v) for v in x]
    assert np.allclose([r for r, _ in pairs], block_ratios)
    assert np.allclose([d for _, d in pairs], block_demods)


def test_estimator_ema_matches_recurrence() -> None:
    cfg = DetectorConfig()
    est = _estimator(cfg)
    x = _tone(50, FC + 20.0)
    est.estimate_block(x)

    lo = LocalOscillator(cfg.lo_frequency_norm)
    wide = LowPassStage(cfg.wide_order, cfg.wide_cutoff_norm)
    narrow = LowPassStage(cfg.narrow_order, cfg.narrow_cutoff_norm)
    n0 = s0 = 0.0
    for v in x:
        y1 = wide.feed(v * lo.read().conjugate())
        n0 += cfg.alpha * (abs(y1) ** 2 - n0)
        y2 = narrow.feed(y1)
        s0 += cfg.alpha * (abs(y2) ** 2 - s0)
    assert est.noise_power == pytest.approx(n0, rel=1e-9)
    assert est.signal_power == pytest.approx(s0, rel=1e-9)


def test_compositor_reads_oldest_phase_difference() -> None:
    length = 3
    window = EnergyWindow(length)
    comp = OutputCompositor(length)
    phases = [0.0, 0.3, 0.9, -0.4, 2.0, -2.5, 1.1]
    demods = [2.0 * np.exp(1j * p) for p in phases]
    outputs = []
    for d in demods:
        _, slot = window.push(0.0)
        outputs.append(comp.compose(d, slot, True))
    diffs = [phases[0]] + [b - a for a, b in zip(phases, phases[1:])]
    wrapped = [float(np.angle(np.exp(1j * v))) for v in diffs]
    for k in range(length - 1, len(demods)):
        assert outputs[k].real == 1.0
        assert outputs[k].imag == pytest.approx(wrapped[k - (length - 1)])


def test_compositor_outputs_zero_when_invalid() -> None:
    comp = OutputCompositor(2)
    assert comp.compose(1j, 1, False) == 0j
    assert comp.previous == 1j
