"""
Time Highlight

Places statements on the debate timeline through their firstMention and
finds the two neighbours of a cursor.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional

from debatemap.contracts import Statement
from debatemap.timecodes import clock_to_seconds, parse_cursor


@dataclass(frozen=True)
class TimeNeighbors:
    """Nearest statement at or before the cursor, and the first one after it."""
    lower_id: Optional[str] = None
    upper_id: Optional[str] = None

    def ids(self) -> frozenset:
        return frozenset(i for i in (self.lower_id, self.upper_id) if i)


def time_neighbors(nodes: Iterable[Statement], cursor: str) -> TimeNeighbors:
    """
    Lower neighbour: greatest timestamp <= cursor.
    Upper neighbour: smallest timestamp > cursor.

    Ties keep the first node in iteration order. Nodes whose firstMention has
    no clock reading are ignored.
    """
    at = parse_cursor(cursor)
    lower = upper = None
    lower_at = upper_at = None
    for node in nodes:
        seconds = clock_to_seconds(node.first_mention)
        if seconds is None:
            continue
        if seconds <= at:
            if lower_at is None or seconds > lower_at:
                lower, lower_at = node.id, seconds
        elif upper_at is None or seconds < upper_at:
            upper, upper_at = node.id, seconds
    return TimeNeighbors(lower_id=lower, upper_id=upper)
