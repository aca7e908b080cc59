"""
Estimated start time for someone joining a provider's walk-in queue.

Queue entries have no scheduled time. Each active entry is assumed to take
one service duration, served strictly in the order supplied, starting at
"now" rounded up to the service grid. Those projected ranges are merged
with confirmed bookings and today's working hours are searched for the
first free slot. Only the current calendar day is considered.
"""

import logging
from typing import Iterable, List, Optional

import pendulum
from pendulum import DateTime

from .intervals import blocked_ranges, merge_intervals
from .models import (
    Booking,
    Company,
    Provider,
    QueueEntry,
    QueueEstimate,
    Service,
    TimeRange,
)
from .timegrid import candidate_ranges, round_up_to_duration
from .working_hours import WorkingHoursParser, opening_window

logger = logging.getLogger(__name__)


class QueueEstimator:
    """Projects queue occupancy onto today's schedule to estimate a start time."""

    def __init__(self, parser: Optional[WorkingHoursParser] = None):
        self._parser = parser or WorkingHoursParser()

    def estimate_start(
        self,
        company: Company,
        service: Service,
        provider: Provider,
        confirmed_bookings_today: Iterable[Booking],
        active_queue_entries: Iterable[QueueEntry],
        now: Optional[DateTime] = None
    ) -> Optional[DateTime]:
        """
        Estimate when a new queue joiner would start being served.

        Args:
            company: Company whose working hours apply
            service: Service whose duration is used per queued person
            provider: Provider the queue is for
            confirmed_bookings_today: The provider's bookings for today
            active_queue_entries: Queue entries in service order; only
                waiting/serving entries for ``provider`` count
            now: Current time; defaults to the system clock

        Returns:
            The first free grid-aligned start today, or None when the
            company is closed, the duration is invalid or the day is full.
        """
        duration = service.duration_minutes()
        if duration is None:
            logger.debug(
                "Service %s has invalid duration %r, no estimate",
                service.id, service.estimated_duration_minutes
            )
            return None

        now = now or pendulum.now()

        windows = self._parser.parse(company.working_hours).for_date(now)
        if not windows:
            logger.debug("Company %s is closed on %s", company.id, now.to_date_string())
            return None

        busy = [
            time_range
            for time_range in blocked_ranges(confirmed_bookings_today, provider.id)
            if time_range.end > now
        ]
        busy.extend(self._project_queue(active_queue_entries, provider, now, duration))
        merged = merge_intervals(busy)

        estimate = self._first_free_start(windows, merged, now, duration)
        if estimate is None:
            logger.debug("Provider %s has no free time left on %s", provider.id, now.to_date_string())
            return None

        if estimate < now:
            estimate = round_up_to_duration(now.add(minutes=duration), duration)

        return estimate

    def estimate(
        self,
        company: Company,
        service: Service,
        provider: Provider,
        confirmed_bookings_today: Iterable[Booking],
        active_queue_entries: Iterable[QueueEntry],
        now: Optional[DateTime] = None
    ) -> QueueEstimate:
        """Return the advisory queue position together with the estimated start."""
        entries = list(active_queue_entries)

        return QueueEstimate(
            position=self.queue_position(entries, provider),
            estimated_start=self.estimate_start(
                company,
                service,
                provider,
                confirmed_bookings_today,
                entries,
                now=now
            )
        )

    @staticmethod
    def queue_position(active_queue_entries: Iterable[QueueEntry], provider: Provider) -> int:
        """Position a new joiner would take; the store assigns the final one."""
        return sum(1 for entry in active_queue_entries if _counts_for(entry, provider)) + 1

    def latest_available_time(
        self,
        company: Company,
        provider: Provider,
        reservations: Iterable[Booking],
        now: Optional[DateTime] = None
    ) -> Optional[DateTime]:
        """
        Return the latest of now, today's opening time and the end of the
        provider's last reservation.

        Returns None if the company is closed today.
        """
        now = now or pendulum.now()

        opening = opening_window(company, now)
        if opening is None:
            return None

        candidates = [now, opening.start]
        candidates.extend(time_range.end for time_range in blocked_ranges(reservations, provider.id))

        return max(candidates)

    @staticmethod
    def _project_queue(
        entries: Iterable[QueueEntry],
        provider: Provider,
        now: DateTime,
        duration: int
    ) -> List[TimeRange]:
        projected: List[TimeRange] = []
        start = round_up_to_duration(now, duration)

        for entry in entries:
            if not _counts_for(entry, provider):
                continue
            end = start.add(minutes=duration)
            projected.append(TimeRange(start=start, end=end))
            start = end

        return projected

    @staticmethod
    def _first_free_start(windows, busy: List[TimeRange], now: DateTime, duration: int) -> Optional[DateTime]:
        for window in sorted(windows, key=lambda w: w.start):
            anchored = window.anchor(now)
            if anchored is None:
                logger.debug("Window %s does not exist on %s, skipped", window, now.to_date_string())
                continue

            for candidate in candidate_ranges(anchored, now, duration):
                if not any(candidate.overlaps(busy_range) for busy_range in busy):
                    return candidate.start
        return None


def _counts_for(entry: QueueEntry, provider: Provider) -> bool:
    return entry.is_active() and entry.provider_id == provider.id
