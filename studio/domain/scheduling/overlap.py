"""
Interval overlap checks for schedule windows.

Both checks accept open-ended ranges: a missing bound (None) leaves that side
of the range unbounded. A range with neither bound carries no schedule in that
dimension and never overlaps anything.
"""

from datetime import date
from typing import Callable, Optional, TypeVar

T = TypeVar("T", date, int)


def _overlaps(
    a_start: Optional[T],
    a_end: Optional[T],
    b_start: Optional[T],
    b_end: Optional[T],
    ends_before: Callable[[T, T], bool],
) -> bool:
    if (a_start is None and a_end is None) or (b_start is None and b_end is None):
        return False
    if a_end is not None and b_start is not None and ends_before(a_end, b_start):
        return False
    if b_end is not None and a_start is not None and ends_before(b_end, a_start):
        return False
    return True


def dates_overlap(
    a_start: Optional[date],
    a_end: Optional[date],
    b_start: Optional[date],
    b_end: Optional[date],
) -> bool:
    """
    Inclusive calendar-date ranges share at least one day.

    Ranges overlap unless one ends strictly before the other starts, so
    2024-06-01..2024-06-03 and 2024-06-03..2024-06-05 overlap on June 3.
    """
    return _overlaps(a_start, a_end, b_start, b_end, lambda end, start: end < start)


def hours_overlap(
    a_start: Optional[int],
    a_end: Optional[int],
    b_start: Optional[int],
    b_end: Optional[int],
) -> bool:
    """
    Half-open hour ranges [start, end) share at least one instant.

    Touching endpoints do not overlap: [9, 17) and [17, 20) are disjoint.
    """
    return _overlaps(a_start, a_end, b_start, b_end, lambda end, start: end <= start)
