"""Exception types raised by the detector and its I/O layer."""

from __future__ import annotations

from typing import Optional


class MeteoDetectError(Exception):
    """Base class for meteodetect failures."""


class DetectorInitError(MeteoDetectError):
    """Detector construction failed (filter design or buffer allocation).

    No partially built detector is ever handed back; resources acquired
    before the failure have already been released when this is raised.
    """


class SampleIOError(MeteoDetectError):
    """Opening, reading or writing a sample stream failed."""

    def __init__(self, path: str, reason: str, *, mode: str = "open"):
        super().__init__(f"cannot {mode} `{path}': {reason}")
        self.path = path
        self.reason = reason
        self.mode = mode

    @classmethod
    def from_os_error(cls, path: str, exc: OSError, *, mode: str = "open") -> "SampleIOError":
        reason: Optional[str] = exc.strerror
        return cls(path, reason or str(exc), mode=mode)
