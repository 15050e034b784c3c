"""Meteor-scatter chirp detector.

Ties the power estimator, the sliding energy integral, the chirp state
machine and the output compositor together. One output sample is produced
per input sample; its real part is 1 while the detector considers the data
valid (inside a chirp or its tail) and 0 otherwise, and its imaginary part
carries the differential phase of the narrow-band signal delayed by the
energy window length so that it lines up with the detection decision.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from meteodetect.config import DetectorConfig
from meteodetect.detection.state import ChirpStateMachine
from meteodetect.detection.types import ChirpEvent, DetectorState
from meteodetect.dsp.demod import OutputCompositor
from meteodetect.dsp.estimator import PowerEstimator
from meteodetect.dsp.filters import LowPassStage
from meteodetect.dsp.integral import EnergyWindow
from meteodetect.dsp.oscillator import LocalOscillator
from meteodetect.errors import DetectorInitError
from meteodetect.io.iq import OutputSink

logger = logging.getLogger(__name__)


class ChirpDetector:
    """Streaming chirp detector bound to one output sink.

    If ``sink`` is omitted the detector opens ``config.output_path``. A sink
    passed in is owned by the detector from then on: it is closed by
    :meth:`close`, and also when construction fails.

    Raises:
        DetectorInitError: filter design or buffer allocation failed.
        SampleIOError: the output file could not be opened.
    """

    def __init__(self, config: DetectorConfig, sink: Optional[OutputSink] = None):
        self.config = config
        self.sample_rate = config.sample_rate
        self.sample_count = 0
        self.events: List[ChirpEvent] = []
        self.sink: Optional[OutputSink] = None

        length = config.window_length
        try:
            lo = LocalOscillator(config.lo_frequency_norm)
            wide = LowPassStage(config.wide_order, config.wide_cutoff_norm)
            narrow = LowPassStage(config.narrow_order, config.narrow_cutoff_norm)
            self.estimator = PowerEstimator(lo, wide, narrow, config.alpha)
            self.window = EnergyWindow(length, incremental=config.incremental_integral)
            self.compositor = OutputCompositor(length)
            self.state_machine = ChirpStateMachine(length, config.energy_threshold, config.sample_rate)
        except (ValueError, MemoryError) as exc:
            if sink is not None:
                sink.close()
            raise DetectorInitError(f"cannot build detector: {exc}") from exc

        self.sink = sink if sink is not None else OutputSink(config.output_path)
        logger.debug(
            "Detector ready: L=%d alpha=%.6g energy_threshold=%.4f",
            length,
            config.alpha,
            config.energy_threshold,
            extra={"output_path": self.sink.path},
        )

    @property
    def window_length(self) -> int:
        return self.window.length

    @property
    def energy_threshold(self) -> float:
        return self.state_machine.energy_threshold

    @property
    def state(self) -> DetectorState:
        return self.state_machine.state

    @property
    def valid(self) -> bool:
        return self.state_machine.valid

    @property
    def closed(self) -> bool:
        return self.sink is None

    def feed(self, x: complex) -> complex:
        """Process one sample and return the composed output sample."""
        return complex(self.process(np.array([x], dtype=np.complex128))[0])

    def process(self, samples: np.ndarray) -> np.ndarray:
        """Process consecutive samples, write and return the composed outputs."""
        if self.sink is None:
            raise RuntimeError("detector is closed")
        samples = np.asarray(samples, dtype=np.complex128).ravel()
        ratios, demods = self.estimator.estimate_block(samples)

        out = np.zeros(samples.size, dtype=np.complex128)
        window = self.window
        machine = self.state_machine
        compose = self.compositor.compose
        for i in range(samples.size):
            integral, slot = window.push(float(ratios[i]))
            event = machine.step(integral, self.sample_count)
            if event is not None:
                self._emit(event)
            out[i] = compose(complex(demods[i]), slot, machine.valid)
            self.sample_count += 1

        self.sink.write(out)
        return out

    def _emit(self, event: ChirpEvent) -> None:
        if self.sink is None:
            raise RuntimeError("detector is closed")
        self.events.append(event)
        logger.info(
            "Chirp at sample %d, %d samples long",
            event.onset_sample,
            event.length_samples,
            extra={"onset_sample": event.onset_sample, "length_samples": event.length_samples},
        )
        self.sink.emit(event)

    def close(self) -> None:
        if self.sink is None:
            return
        try:
            self.sink.close()
        finally:
            self.sink = None

    def __enter__(self) -> "ChirpDetector":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
