"""Raw IQ capture reader and detector output sink.

Samples are stored as interleaved little-endian float32 I/Q pairs
(numpy ``complex64``), with no header; the sample rate is supplied
out of band.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import BinaryIO, Iterator, Optional, TextIO, Union

import numpy as np

from meteodetect.detection.types import ChirpEvent
from meteodetect.errors import SampleIOError
from meteodetect.util.event_logger import EventLogger

IQ_DTYPE = np.dtype("<c8")

logger = logging.getLogger(__name__)


class IQReader:
    """Read a raw complex64 capture in chunks.

    The file is opened on construction so an unreadable input is reported
    before any processing starts. Trailing bytes that do not form a whole
    sample are dropped with a warning.
    """

    def __init__(self, path: Union[str, os.PathLike], chunk_size: int = 65536):
        if int(chunk_size) < 1:
            raise ValueError("chunk_size must be >= 1")
        self.path = os.fspath(path)
        self.chunk_size = int(chunk_size)
        self.samples_read = 0
        try:
            self._fh: Optional[BinaryIO] = open(self.path, "rb")
        except OSError as exc:
            raise SampleIOError.from_os_error(self.path, exc, mode="open") from exc

    def __iter__(self) -> Iterator[np.ndarray]:
        if self._fh is None:
            raise RuntimeError("reader is closed")
        item = IQ_DTYPE.itemsize
        pending = b""
        while True:
            try:
                raw = self._fh.read(self.chunk_size * item)
            except OSError as exc:
                raise SampleIOError.from_os_error(self.path, exc, mode="read") from exc
            if not raw:
                break
            data = pending + raw
            usable = len(data) - len(data) % item
            pending = data[usable:]
            if usable:
                chunk = np.frombuffer(data[:usable], dtype=IQ_DTYPE)
                self.samples_read += chunk.size
                yield chunk
        if pending:
            logger.warning(
                "Ignoring %d trailing byte(s) in %s (not a whole sample)",
                len(pending),
                self.path,
                extra={"input_path": self.path},
            )

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "IQReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def read_iq_file(path: Union[str, os.PathLike]) -> np.ndarray:
    """Load a whole capture into memory."""
    with IQReader(path) as reader:
        chunks = list(reader)
    if not chunks:
        return np.zeros(0, dtype=IQ_DTYPE)
    return np.concatenate(chunks)


def write_iq_file(path: Union[str, os.PathLike], samples: np.ndarray) -> None:
    """Write samples as a raw complex64 capture."""
    try:
        with open(path, "wb") as fh:
            fh.write(np.asarray(samples).astype(IQ_DTYPE).tobytes())
    except OSError as exc:
        raise SampleIOError.from_os_error(os.fspath(path), exc, mode="write") from exc


class OutputSink:
    """Destination for composed output samples and chirp report lines.

    ``target`` is either a path (opened and owned by the sink) or an
    already-open binary stream (flushed but left open on close). Report
    lines go to ``event_stream``, stdout unless given.
    """

    def __init__(
        self,
        target: Union[str, os.PathLike, BinaryIO],
        *,
        event_stream: Optional[TextIO] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        if isinstance(target, (str, os.PathLike)):
            self.path = os.fspath(target)
            try:
                self._fh: Optional[BinaryIO] = open(self.path, "wb")
            except OSError as exc:
                raise SampleIOError.from_os_error(self.path, exc, mode="open") from exc
            self._owns_stream = True
        else:
            self.path = str(getattr(target, "name", "<stream>"))
            self._fh = target
            self._owns_stream = False
        self.event_stream = event_stream if event_stream is not None else sys.stdout
        self.event_logger = event_logger
        self.samples_written = 0
        self.events_emitted = 0

    @property
    def closed(self) -> bool:
        return self._fh is None

    def write(self, samples: np.ndarray) -> None:
        if self._fh is None:
            raise RuntimeError("output sink is closed")
        data = np.asarray(samples).astype(IQ_DTYPE)
        try:
            self._fh.write(data.tobytes())
        except OSError as exc:
            raise SampleIOError.from_os_error(self.path, exc, mode="write") from exc
        self.samples_written += data.size

    def emit(self, event: ChirpEvent) -> None:
        self.event_stream.write(event.format_line())
        self.event_stream.flush()
        if self.event_logger is not None:
            self.event_logger.log("chirp", **event.to_record())
        self.events_emitted += 1

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.flush()
        finally:
            if self._owns_stream:
                self._fh.close()
            self._fh = None
