"""Sliding energy integral over the most recent power ratios."""

from __future__ import annotations

from typing import Tuple

import numpy as np


class EnergyWindow:
    """Fixed-length ring of power ratios and their sum.

    After every push the cursor points at the oldest slot, which is also
    the slot the caller's lag buffer reads to stay aligned with the window.

    By default the sum is recomputed over all slots on every push. With
    ``incremental=True`` a running sum is kept instead (overwritten value
    subtracted, new value added); results then differ in the last bits.
    """

    def __init__(self, length: int, *, incremental: bool = False):
        if int(length) < 1:
            raise ValueError("window length must be >= 1")
        self.length = int(length)
        self.incremental = bool(incremental)
        self.values = np.zeros(self.length, dtype=np.float64)
        self.cursor = 0
        self._running = 0.0

    def push(self, ratio: float) -> Tuple[float, int]:
        """Store ``ratio``, advance the cursor, return (integral, oldest slot)."""
        if self.incremental:
            self._running += ratio - self.values[self.cursor]
        self.values[self.cursor] = ratio
        self.cursor += 1
        if self.cursor == self.length:
            self.cursor = 0
        return self.integral, self.cursor

    @property
    def integral(self) -> float:
        if self.incremental:
            return self._running
        return float(np.sum(self.values))
