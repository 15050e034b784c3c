"""End-to-end detection over a recorded capture."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, TextIO

from meteodetect.config import DetectorConfig
from meteodetect.detection.detector import ChirpDetector
from meteodetect.io.iq import IQReader, OutputSink
from meteodetect.util.event_logger import EventLogger

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    input_path: str
    output_path: str
    sample_rate: float
    samples: int
    chirps: int
    elapsed_s: float

    @property
    def capture_seconds(self) -> float:
        return self.samples / self.sample_rate


class DetectionRunner:
    """Bind a capture file, a detector config and the output sinks."""

    def __init__(
        self,
        input_path: str,
        config: DetectorConfig,
        *,
        chunk_size: int = 65536,
        jsonl_path: Optional[str] = None,
        event_stream: Optional[TextIO] = None,
    ):
        self.input_path = os.fspath(input_path)
        self.config = config
        self.chunk_size = int(chunk_size)
        self.event_logger = EventLogger.from_path(jsonl_path) if jsonl_path else None
        self.event_stream = event_stream

    def run(self) -> RunSummary:
        start = time.monotonic()
        # Input is opened before the output file is created.
        with IQReader(self.input_path, chunk_size=self.chunk_size) as reader:
            sink = OutputSink(
                self.config.output_path,
                event_stream=self.event_stream,
                event_logger=self.event_logger,
            )
            with ChirpDetector(self.config, sink=sink) as detector:
                if self.event_logger is not None:
                    self.event_logger.log("run_start", input_path=self.input_path, config=self.config.describe())
                for chunk in reader:
                    detector.process(chunk)
                summary = RunSummary(
                    input_path=self.input_path,
                    output_path=sink.path,
                    sample_rate=self.config.sample_rate,
                    samples=detector.sample_count,
                    chirps=len(detector.events),
                    elapsed_s=time.monotonic() - start,
                )
        if self.event_logger is not None:
            self.event_logger.log(
                "run_summary",
                samples=summary.samples,
                chirps=summary.chirps,
                elapsed_s=round(summary.elapsed_s, 3),
            )
        logger.info(
            "Processed %d samples, %d chirp(s) detected",
            summary.samples,
            summary.chirps,
            extra={"input_path": self.input_path, "sample_count": summary.samples, "duration_ms": int(summary.elapsed_s * 1000)},
        )
        return summary


def run_detection(input_path: str, config: DetectorConfig, **kwargs) -> RunSummary:
    return DetectionRunner(input_path, config, **kwargs).run()
