"""JSON-lines chirp event log."""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any

from meteodetect.util.time import utc_now_str

logger = logging.getLogger(__name__)


class EventLogger:
    """Append one JSON record per event to ``log_path``."""

    def __init__(self, log_path: Path):
        self.log_path = log_path
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Cannot create directory for event log %s: %s", log_path, exc)
        self.run_id = f"run-{int(time.time() * 1000)}-pid{os.getpid()}"
        self._write_failed = False

    @classmethod
    def from_path(cls, path: str) -> "EventLogger":
        return cls(Path(path).expanduser())

    def log(self, event: str, **fields: Any) -> None:
        record = {
            "ts": utc_now_str(),
            "run_id": self.run_id,
            "event": event,
            **fields,
        }
        try:
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record) + "\n")
        except OSError as exc:
            if not self._write_failed:
                self._write_failed = True
                logger.warning("Cannot write event log %s: %s", self.log_path, exc)
