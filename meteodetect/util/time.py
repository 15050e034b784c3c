"""Time utilities shared across meteodetect components."""

from __future__ import annotations

import math
from datetime import datetime, timezone


def utc_now_str() -> str:
    """Return the current UTC timestamp as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def format_hms(seconds: float) -> str:
    """Format the floor of ``seconds`` as ``HH:MM:SS`` (hours may exceed 99)."""
    whole = max(0, int(math.floor(seconds)))
    return f"{whole // 3600:02d}:{(whole // 60) % 60:02d}:{whole % 60:02d}"
