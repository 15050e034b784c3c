"""Logging setup for the meteodetect CLI.

Library modules only create loggers (``logging.getLogger(__name__)``);
handlers are installed by :func:`configure_logging`, which the CLI calls
once per run. Chirp report lines are not log records: the output sink
writes them to stdout.

    METEODETECT_DEBUG=1        force DEBUG
    METEODETECT_LOG_LEVEL=...  default level when none is passed
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional


ROOT_LOGGER = "meteodetect"

_EXTRA_KEYS = (
    "input_path",
    "output_path",
    "sample_count",
    "onset_sample",
    "length_samples",
    "error_type",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, carrying the detector's extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        output: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        output.update({key: getattr(record, key) for key in _EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            output["traceback"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(output, default=str)


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        if os.environ.get("METEODETECT_DEBUG", "").strip() in ("1", "true", "yes"):
            level = "DEBUG"
        else:
            level = os.environ.get("METEODETECT_LOG_LEVEL", "WARNING")
    return getattr(logging, level.upper(), logging.WARNING)


def configure_logging(*, level: Optional[str] = None, json_file: Optional[str] = None) -> None:
    """Install stderr (and optionally JSON file) handlers on the meteodetect logger.

    Calling it again replaces the handlers installed by the previous call.
    """
    numeric_level = _resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        logging.Formatter("[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(console_handler)

    if json_file:
        try:
            file_handler = logging.FileHandler(json_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to open JSON log file %s: %s", json_file, exc)
        else:
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)

    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return ``name`` as a child of the meteodetect logger. Installs no handlers."""
    if name == "__main__":
        name = f"{ROOT_LOGGER}.main"
    elif not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    message: str,
    *,
    error_type: Optional[str] = None,
    **extra: Any,
) -> None:
    """Log the exception being handled, tagging it with ``error_type``."""
    extra_dict = dict(extra)
    if error_type:
        extra_dict["error_type"] = error_type
    logger.exception(message, extra=extra_dict)
