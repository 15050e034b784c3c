"""Stateful Butterworth low-pass stages built on scipy.signal."""

from __future__ import annotations

import numpy as np
from scipy.signal import butter, sosfilt


class LowPassStage:
    """Causal low-pass filter that keeps its state between calls.

    ``cutoff_norm`` is the cutoff frequency normalized to Nyquist (0..1).
    The filter starts from rest (zero state), so the first output is the
    response to the first input alone.
    """

    def __init__(self, order: int, cutoff_norm: float):
        if int(order) < 1:
            raise ValueError("filter order must be >= 1")
        if not (0.0 < float(cutoff_norm) < 1.0):
            raise ValueError(f"normalized cutoff must lie in (0, 1), got {cutoff_norm!r}")
        self.order = int(order)
        self.cutoff_norm = float(cutoff_norm)
        self.sos = butter(self.order, self.cutoff_norm, btype="low", output="sos")
        self._zi = np.zeros((self.sos.shape[0], 2), dtype=np.complex128)

    def feed(self, x: complex) -> complex:
        return complex(self.feed_block(np.array([x], dtype=np.complex128))[0])

    def feed_block(self, samples: np.ndarray) -> np.ndarray:
        samples = np.asarray(samples, dtype=np.complex128)
        if samples.size == 0:
            return samples.copy()
        out, self._zi = sosfilt(self.sos, samples, zi=self._zi)
        return out
