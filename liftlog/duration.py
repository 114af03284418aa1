"""Conversions between "m:ss" text and milliseconds."""

from __future__ import annotations

import re
from typing import Optional

_DURATION_RE = re.compile(r"^(\d*):(\d*)$")


def parse_duration(text: str) -> Optional[int]:
    """Parse "m:ss" into milliseconds. Empty or malformed text gives None.

    Minutes are unbounded and seconds are not range-checked, so "1:75" is
    135000. A missing side counts as zero (":30" is 30000).
    """
    if text is None or not text.strip():
        return None
    m = _DURATION_RE.match(text.strip())
    if not m:
        return None
    minutes = int(m.group(1) or 0)
    seconds = int(m.group(2) or 0)
    return (minutes * 60 + seconds) * 1000


def format_duration(duration_ms: int) -> str:
    if duration_ms < 0:
        raise ValueError("duration must be non-negative")
    minutes, seconds = divmod(int(duration_ms) // 1000, 60)
    return f"{minutes}:{seconds:02d}"


def format_rest_time(seconds: int) -> str:
    return format_duration(int(seconds) * 1000)
