"""
Helpers for stepping through a working-hours window on the service grid.
"""

from typing import Iterator, Optional, Tuple

import pendulum
from pendulum import DateTime

from .models import TimeRange


def round_up_to_duration(moment: DateTime, duration_minutes: int) -> DateTime:
    """
    Round ``moment`` up to the next multiple of the duration past the hour.

    Seconds are dropped after rounding, so 10:07 with 30 minutes gives 10:30.
    """
    remainder = moment.minute % duration_minutes
    if remainder:
        moment = moment.add(minutes=duration_minutes - remainder)
    return moment.set(second=0, microsecond=0)


def first_candidate(window: TimeRange, now: DateTime, duration_minutes: int) -> DateTime:
    """
    Return where slot search starts in ``window``.

    A window that already started begins at "now" rounded up to the grid.
    """
    if window.start >= now:
        return window.start
    return max(round_up_to_duration(now, duration_minutes), window.start)


def candidate_ranges(window: TimeRange, now: DateTime, duration_minutes: int) -> Iterator[TimeRange]:
    """Yield consecutive duration-sized ranges that fit inside ``window``."""
    start = first_candidate(window, now, duration_minutes)

    while start.add(minutes=duration_minutes) <= window.end:
        end = start.add(minutes=duration_minutes)
        yield TimeRange(start=start, end=end)
        start = end


def align_timezones(now: Optional[DateTime], target_date: DateTime) -> Tuple[DateTime, DateTime]:
    """
    Return ``now`` (the current time if None) and ``target_date`` in one timezone.

    ``now`` is converted into ``target_date``'s timezone. A naive
    ``target_date`` is read as wall-clock time in ``now``'s timezone, and a
    naive ``now`` as wall-clock time in ``target_date``'s.
    """
    if now is None:
        now = pendulum.now()

    if target_date.tzinfo is None:
        if now.tzinfo is None:
            return now, target_date
        return now, target_date.replace(tzinfo=now.tzinfo)

    if now.tzinfo is None:
        return now.replace(tzinfo=target_date.tzinfo), target_date

    return now.in_timezone(target_date.tzinfo), target_date
