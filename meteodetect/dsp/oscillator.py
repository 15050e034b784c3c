"""Numerically controlled local oscillator."""

from __future__ import annotations

import numpy as np


class LocalOscillator:
    """Unit-magnitude complex phasor advancing by a fixed frequency per sample.

    The phase of sample ``n`` is computed from the absolute sample index
    rather than accumulated, so reading one block of 1000 phasors or 1000
    single phasors yields identical values.
    """

    def __init__(self, frequency_norm: float):
        self.frequency_norm = float(frequency_norm)
        self.index = 0

    def read(self) -> complex:
        return complex(self.read_block(1)[0])

    def read_block(self, count: int) -> np.ndarray:
        n = np.arange(self.index, self.index + int(count), dtype=np.float64)
        self.index += int(count)
        cycles = np.mod(self.frequency_norm * n, 1.0)
        return np.exp(2j * np.pi * cycles)
