"""Detector configuration.

The tuning constants of the detector live in one immutable value built once
per run and handed to the detector. Defaults match a typical 8 kHz audio
capture of a meteor-scatter receiver with the beacon tone at 1 kHz.

Environment overrides (read by :meth:`DetectorConfig.from_env`):

    METEODETECT_SAMPLE_RATE   Sample rate of the capture in Hz
    METEODETECT_CENTER_FREQ   Local oscillator frequency in Hz
    METEODETECT_OUTPUT        Output file path
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Any, Dict


DEFAULT_SAMPLE_RATE: float = 8000.0
DEFAULT_CENTER_FREQUENCY: float = 1000.0
DEFAULT_WIDE_ORDER: int = 5
DEFAULT_WIDE_CUTOFF: float = 300.0
DEFAULT_NARROW_ORDER: int = 4
DEFAULT_NARROW_CUTOFF: float = 50.0
DEFAULT_MIN_CHIRP_DURATION: float = 0.07
DEFAULT_OUTPUT_PATH: str = "detect.raw"


def _float_env(name: str, default: float) -> float:
    """Parse a float from environment, returning default on missing/invalid."""
    val = os.getenv(name)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class DetectorConfig:
    """Immutable detector parameters and the constants derived from them."""

    sample_rate: float = DEFAULT_SAMPLE_RATE
    center_frequency: float = DEFAULT_CENTER_FREQUENCY
    wide_order: int = DEFAULT_WIDE_ORDER
    wide_cutoff: float = DEFAULT_WIDE_CUTOFF
    narrow_order: int = DEFAULT_NARROW_ORDER
    narrow_cutoff: float = DEFAULT_NARROW_CUTOFF
    min_chirp_duration: float = DEFAULT_MIN_CHIRP_DURATION
    output_path: str = DEFAULT_OUTPUT_PATH
    incremental_integral: bool = False

    def __post_init__(self) -> None:
        if not (self.sample_rate > 0.0) or not math.isfinite(self.sample_rate):
            raise ValueError("sample_rate must be a positive finite number")
        if not math.isfinite(self.center_frequency):
            raise ValueError("center_frequency must be finite")
        nyquist = self.sample_rate / 2.0
        for name in ("wide_cutoff", "narrow_cutoff"):
            value = getattr(self, name)
            if not (0.0 < value < nyquist):
                raise ValueError(f"{name} must lie in (0, {nyquist:g}) Hz, got {value!r}")
        for name in ("wide_order", "narrow_order"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"{name} must be >= 1")
        if not (self.min_chirp_duration > 0.0):
            raise ValueError("min_chirp_duration must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> "DetectorConfig":
        """Build a config from METEODETECT_* variables, then apply ``overrides``."""
        base: Dict[str, Any] = {
            "sample_rate": _float_env("METEODETECT_SAMPLE_RATE", DEFAULT_SAMPLE_RATE),
            "center_frequency": _float_env("METEODETECT_CENTER_FREQ", DEFAULT_CENTER_FREQUENCY),
            "output_path": os.getenv("METEODETECT_OUTPUT") or DEFAULT_OUTPUT_PATH,
        }
        base.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**base)

    @property
    def window_length(self) -> int:
        """Energy window and lag buffer length L in samples."""
        # Round first so float noise (e.g. 0.07 * 8000) cannot add a sample.
        return max(1, int(math.ceil(round(self.sample_rate * self.min_chirp_duration, 9))))

    @property
    def alpha(self) -> float:
        """EMA smoothing factor with a time constant of one minimum chirp."""
        return 1.0 - math.exp(-1.0 / (self.sample_rate * self.min_chirp_duration))

    @property
    def power_ratio(self) -> float:
        return self.narrow_cutoff / self.wide_cutoff

    @property
    def power_threshold(self) -> float:
        return 2.0 * self.power_ratio

    @property
    def energy_threshold(self) -> float:
        return self.power_threshold * self.window_length

    @property
    def wide_cutoff_norm(self) -> float:
        """Wide cutoff normalized to Nyquist, as scipy.signal.butter expects."""
        return 2.0 * self.wide_cutoff / self.sample_rate

    @property
    def narrow_cutoff_norm(self) -> float:
        return 2.0 * self.narrow_cutoff / self.sample_rate

    @property
    def lo_frequency_norm(self) -> float:
        """Local oscillator frequency in cycles per sample."""
        return self.center_frequency / self.sample_rate

    def describe(self) -> Dict[str, Any]:
        """Return a JSON-serializable view including derived constants."""
        return {
            "sample_rate": self.sample_rate,
            "center_frequency": self.center_frequency,
            "wide_order": self.wide_order,
            "wide_cutoff": self.wide_cutoff,
            "narrow_order": self.narrow_order,
            "narrow_cutoff": self.narrow_cutoff,
            "min_chirp_duration": self.min_chirp_duration,
            "output_path": self.output_path,
            "incremental_integral": self.incremental_integral,
            "window_length": self.window_length,
            "alpha": self.alpha,
            "energy_threshold": self.energy_threshold,
        }
