from meteodetect.detection.state import ChirpStateMachine
from meteodetect.detection.types import ChirpEvent, DetectorState

L = 4
THRESH = 10.0
FS = 100.0


def _machine() -> ChirpStateMachine:
    return ChirpStateMachine(L, THRESH, FS)


def test_idle_below_threshold_is_invalid() -> None:
    sm = _machine()
    for n in range(10):
        assert sm.step(THRESH - 0.1, n) is None
        assert not sm.valid
    assert sm.state is DetectorState.IDLE


def test_onset_backdates_chirp_by_window_length() -> None:
    sm = _machine()
    sm.step(1.0, 100)
    assert sm.step(THRESH, 101) is None
    assert sm.state is DetectorState.IN_CHIRP
    assert sm.chirp_length == L
    assert sm.tail_remaining == L
    sm.step(20.0, 102)
    sm.step(15.0, 103)
    assert sm.chirp_length == L + 2
    event = sm.step(2.0, 104)
    assert event == ChirpEvent(onset_sample=104 - (L + 2), length_samples=L + 2, sample_rate=FS)
    assert sm.state is DetectorState.IDLE


def test_tail_keeps_exactly_window_length_samples_valid() -> None:
    sm = _machine()
    n = 0
    sm.step(THRESH + 1, n)
    for _ in range(5):
        n += 1
        sm.step(THRESH + 1, n)
        assert sm.valid
    validity = []
    events = []
    for _ in range(L + 3):
        n += 1
        event = sm.step(0.0, n)
        if event is not None:
            events.append(event)
        validity.append(sm.valid)
    assert len(events) == 1
    assert validity == [True] * L + [False] * 3


def test_chirp_can_restart_inside_tail() -> None:
    sm = _machine()
    sm.step(THRESH, 0)
    first = sm.step(0.0, 1)
    assert first is not None
    sm.step(0.0, 2)
    assert sm.tail_remaining == L - 1
    assert sm.step(THRESH, 3) is None
    assert sm.state is DetectorState.IN_CHIRP
    assert sm.tail_remaining == L
    assert sm.chirp_length == L
    second = sm.step(0.0, 4)
    assert second is not None
    assert second.length_samples == L
    validity = []
    for n in range(5, 5 + L + 1):
        sm.step(0.0, n)
        validity.append(sm.valid)
    # the end sample (n=4) was the first tail sample
    assert validity == [True] * (L - 1) + [False] * 2


def test_onset_before_stream_start_is_clamped() -> None:
    sm = _machine()
    sm.step(THRESH, 0)
    event = sm.step(0.0, 1)
    assert event is not None
    assert event.onset_sample == 0
    assert event.length_samples == L


def test_event_line_format() -> None:
    event = ChirpEvent(onset_sample=3725 * 8000 + 7999, length_samples=42, sample_rate=8000.0)
    assert event.format_line() == "Chirp of length    42 detected (at 01:02:05)\n"
    record = event.to_record()
    assert record["onset_hms"] == "01:02:05"
    assert record["length_samples"] == 42
