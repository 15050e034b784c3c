"""Dataclasses shared across the detector, sink and runner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from meteodetect.util.time import format_hms


class DetectorState(Enum):
    IDLE = "idle"
    IN_CHIRP = "in_chirp"


@dataclass(frozen=True)
class ChirpEvent:
    """One detected chirp, reported when the energy integral falls back below threshold."""

    onset_sample: int
    length_samples: int
    sample_rate: float

    @property
    def onset_seconds(self) -> float:
        return self.onset_sample / self.sample_rate

    @property
    def duration_seconds(self) -> float:
        return self.length_samples / self.sample_rate

    @property
    def end_sample(self) -> int:
        return self.onset_sample + self.length_samples

    def format_line(self) -> str:
        return f"Chirp of length {self.length_samples:5d} detected (at {format_hms(self.onset_seconds)})\n"

    def to_record(self) -> Dict[str, Any]:
        return {
            "onset_sample": self.onset_sample,
            "onset_seconds": self.onset_seconds,
            "onset_hms": format_hms(self.onset_seconds),
            "length_samples": self.length_samples,
            "duration_seconds": self.duration_seconds,
        }
