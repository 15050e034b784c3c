"""Two-state chirp detector with a post-chirp validity tail."""

from __future__ import annotations

from typing import Optional

from meteodetect.detection.types import ChirpEvent, DetectorState


class ChirpStateMachine:
    """Threshold the sliding energy integral into chirp events.

    ``window_length`` (L) is both the length of the energy window and the
    length of the validity tail. A chirp is declared when the integral
    reaches ``energy_threshold``; since the window already spans L samples
    of elevated energy, the chirp is taken to have started L samples ago.
    When the integral drops below threshold the chirp is reported and
    exactly L further samples (starting with that one) stay valid. A new
    chirp may start at any time, including inside the tail.
    """

    def __init__(self, window_length: int, energy_threshold: float, sample_rate: float):
        if int(window_length) < 1:
            raise ValueError("window_length must be >= 1")
        self.window_length = int(window_length)
        self.energy_threshold = float(energy_threshold)
        self.sample_rate = float(sample_rate)
        self.state = DetectorState.IDLE
        self.chirp_length = 0
        self.tail_remaining = 0

    @property
    def in_chirp(self) -> bool:
        return self.state is DetectorState.IN_CHIRP

    @property
    def valid(self) -> bool:
        return self.tail_remaining != 0

    def step(self, integral: float, sample_count: int) -> Optional[ChirpEvent]:
        """Advance one sample; ``sample_count`` is the index of the current sample."""
        was_in_chirp = self.in_chirp
        # Decrement before the transition so the tail spans L samples including the end step.
        if not was_in_chirp and self.tail_remaining > 0:
            self.tail_remaining -= 1

        event: Optional[ChirpEvent] = None
        if was_in_chirp:
            if integral < self.energy_threshold:
                event = ChirpEvent(
                    onset_sample=max(sample_count - self.chirp_length, 0),
                    length_samples=self.chirp_length,
                    sample_rate=self.sample_rate,
                )
                self.state = DetectorState.IDLE
            else:
                self.chirp_length += 1
        elif integral >= self.energy_threshold:
            self.state = DetectorState.IN_CHIRP
            self.chirp_length = self.window_length
            self.tail_remaining = self.window_length
        return event
