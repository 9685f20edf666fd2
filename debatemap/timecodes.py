"""
Timecodes

firstMention is free-form text; anything containing a clock reading
(HH:MM:SS or HH:MM) can be placed on the debate timeline.
"""

from __future__ import annotations
from typing import Optional
import re


CLOCK_PATTERN = re.compile(r'(?<!\d)(\d{1,3}):([0-5]\d)(?::([0-5]\d))?(?!\d)')
CURSOR_PATTERN = re.compile(r'^\s*(\d{1,3}):([0-5]\d):([0-5]\d)\s*$')


def clock_to_seconds(text: Optional[str]) -> Optional[int]:
    """
    Seconds for the LAST clock reading found in text, or None.

    "00:12:34" -> 754, "2025-10-20 14:03" -> 50580.
    """
    if not text:
        return None
    matches = list(CLOCK_PATTERN.finditer(text))
    if not matches:
        return None
    hours, minutes, seconds = matches[-1].groups()
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds or 0)


def parse_cursor(text: str) -> int:
    """Strict HH:MM:SS cursor parsing. Raises ValueError."""
    match = CURSOR_PATTERN.match(text or "")
    if not match:
        raise ValueError(f"Time cursor must look like HH:MM:SS, got {text!r}")
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds)
