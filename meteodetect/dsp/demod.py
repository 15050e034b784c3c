"""Differential phase demodulation and output composition."""

from __future__ import annotations

import cmath

import numpy as np


class OutputCompositor:
    """Lag buffer of differential-phase samples and the output encoder.

    The buffer shares its length and cursor with the energy window: the
    sample stored on each step goes into the slot just vacated by the
    window cursor, and the output reads the slot the cursor now points at,
    i.e. the phase difference computed ``length`` samples earlier.
    """

    def __init__(self, length: int):
        if int(length) < 1:
            raise ValueError("lag buffer length must be >= 1")
        self.length = int(length)
        self.lag = np.zeros(self.length, dtype=np.complex128)
        self.previous = 0j

    def compose(self, demod: complex, slot_index: int, valid: bool) -> complex:
        """Store the phase difference for ``demod`` and encode the delayed one."""
        self.lag[(slot_index - 1) % self.length] = demod * self.previous.conjugate()
        self.previous = complex(demod)
        if not valid:
            return 0j
        return complex(1.0, cmath.phase(complex(self.lag[slot_index])))
