"""Dual-bandwidth power estimation."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.signal import lfilter

from meteodetect.dsp.filters import LowPassStage
from meteodetect.dsp.oscillator import LocalOscillator


def _instantaneous_power(x: np.ndarray) -> np.ndarray:
    return x.real * x.real + x.imag * x.imag


class PowerEstimator:
    """Track narrow-band vs wide-band power around the oscillator frequency.

    Each sample is mixed down by the local oscillator, passed through the
    wide stage (noise reference) and then the narrow stage (chirp band).
    Both powers are smoothed by a first-order EMA ``v += alpha * (p - v)``;
    the ratio ``signal_power / noise_power`` is the detection statistic.

    While ``noise_power`` is exactly zero (nothing but zeros seen so far)
    the ratio is reported as ``0.0`` instead of NaN.
    """

    def __init__(self, lo: LocalOscillator, wide: LowPassStage, narrow: LowPassStage, alpha: float):
        if not (0.0 < alpha < 1.0):
            raise ValueError("alpha must lie in (0, 1)")
        self.lo = lo
        self.wide = wide
        self.narrow = narrow
        self.alpha = float(alpha)
        self._ema_b = np.array([self.alpha])
        self._ema_a = np.array([1.0, self.alpha - 1.0])
        self._noise_zi = np.zeros(1, dtype=np.float64)
        self._signal_zi = np.zeros(1, dtype=np.float64)
        self.noise_power = 0.0
        self.signal_power = 0.0

    def estimate(self, x: complex) -> Tuple[float, complex]:
        ratios, demods = self.estimate_block(np.array([x], dtype=np.complex128))
        return float(ratios[0]), complex(demods[0])

    def estimate_block(self, samples: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Return (ratios, narrow-band samples) for consecutive input samples."""
        samples = np.asarray(samples, dtype=np.complex128)
        if samples.size == 0:
            return np.zeros(0, dtype=np.float64), np.zeros(0, dtype=np.complex128)

        mixed = samples * np.conj(self.lo.read_block(samples.size))
        y1 = self.wide.feed_block(mixed)
        noise, self._noise_zi = lfilter(self._ema_b, self._ema_a, _instantaneous_power(y1), zi=self._noise_zi)

        y2 = self.narrow.feed_block(y1)
        signal, self._signal_zi = lfilter(self._ema_b, self._ema_a, _instantaneous_power(y2), zi=self._signal_zi)

        self.noise_power = float(noise[-1])
        self.signal_power = float(signal[-1])

        ratios = np.zeros(samples.size, dtype=np.float64)
        np.divide(signal, noise, out=ratios, where=noise > 0.0)
        return ratios, y2
