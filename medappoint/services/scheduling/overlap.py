# medappoint/services/scheduling/overlap.py
"""
Overlap detection for half-open intervals [start, end).

Shared by slot generation and booking validation; the store-level
exclusion constraint uses the same rule.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


@dataclass(frozen=True)
class BookedInterval:
    """Already-booked time range of a provider."""
    start: datetime
    end: datetime


def overlaps(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """
    True if [a_start, a_end) and [b_start, b_end) share at least one instant.

    Touching intervals (a_end == b_start) do not overlap, and neither does
    a zero-length interval.
    """
    return a_start < b_end and a_end > b_start and a_start < a_end and b_start < b_end


def overlaps_any(
    start: datetime,
    end: datetime,
    booked: Iterable[BookedInterval],
) -> bool:
    return any(overlaps(start, end, b.start, b.end) for b in booked)
