"""
Merging of busy intervals into a minimal sorted set of disjoint ranges.
"""

import logging
from typing import Iterable, List

from .models import Booking, TimeRange

logger = logging.getLogger(__name__)


def merge_intervals(intervals: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or touching time ranges.

    Touching ranges are merged too, since no slot fits in a zero-length gap.

    Example: [09:00-10:00, 10:00-11:00, 10:30-12:00] -> [09:00-12:00]
    """
    sorted_ranges = sorted(intervals, key=lambda r: r.start)
    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        if current.start > last.end:
            merged.append(current)
            continue

        merged[-1] = TimeRange(
            start=min(last.start, current.start),
            end=max(last.end, current.end)
        )

    return merged


def blocked_ranges(bookings: Iterable[Booking], provider_id: str) -> List[TimeRange]:
    """
    Return the time ranges of confirmed bookings held by ``provider_id``.

    Bookings with inverted times are skipped.
    """
    ranges: List[TimeRange] = []

    for booking in bookings:
        if not booking.blocks(provider_id):
            continue

        time_range = booking.time_range()
        if time_range is None:
            logger.warning("Skipping booking %s with inverted times", booking.id or "<unsaved>")
            continue

        ranges.append(time_range)

    return ranges
