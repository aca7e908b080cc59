"""
Generation of bookable appointment slots for one provider and day.

Pure domain logic: all inputs, including the current time, are passed in.
"""

import logging
from typing import Iterable, List, Optional

from pendulum import DateTime

from .intervals import blocked_ranges, merge_intervals
from .models import (
    DEFAULT_LABEL_FORMAT,
    AvailableSlot,
    Booking,
    Company,
    Provider,
    Service,
)
from .timegrid import align_timezones, candidate_ranges
from .working_hours import WorkingHoursParser

logger = logging.getLogger(__name__)


class SlotGenerator:
    """
    Lists the fixed-duration slots a customer can book on a given day.

    Algorithm:
    1. Look up the company's working-hours windows for the target weekday
    2. Anchor each window on the target date
    3. Step through the window in service-duration increments, starting at
       "now" rounded up to the grid if the window already started
    4. Drop slots that already ended or overlap a confirmed booking
    """

    def __init__(
        self,
        label_format: str = DEFAULT_LABEL_FORMAT,
        parser: Optional[WorkingHoursParser] = None
    ):
        self.label_format = label_format
        self._parser = parser or WorkingHoursParser()

    def generate_slots(
        self,
        company: Company,
        service: Service,
        provider: Provider,
        target_date: DateTime,
        confirmed_bookings: Iterable[Booking],
        now: Optional[DateTime] = None
    ) -> List[AvailableSlot]:
        """
        Find all bookable slots on ``target_date``.

        Args:
            company: Company whose working hours apply
            service: Service whose duration sets the slot length
            provider: Provider whose bookings block slots
            target_date: Any moment on the calendar day to search
            confirmed_bookings: Existing bookings; only confirmed ones held
                by ``provider`` are considered
            now: Current time; defaults to the system clock

        Returns:
            Slots in window order, chronological within each window.
            Empty when the day is closed or the service duration is invalid.
        """
        duration = service.duration_minutes()
        if duration is None:
            logger.debug(
                "Service %s has invalid duration %r, no slots",
                service.id, service.estimated_duration_minutes
            )
            return []

        windows = self._parser.parse(company.working_hours).for_date(target_date)
        if not windows:
            logger.debug("Company %s is closed on %s", company.id, target_date.to_date_string())
            return []

        now, target_date = align_timezones(now, target_date)
        busy = merge_intervals(blocked_ranges(confirmed_bookings, provider.id))

        slots: List[AvailableSlot] = []

        for window in windows:
            anchored = window.anchor(target_date)
            if anchored is None:
                logger.debug("Window %s does not exist on %s, skipped", window, target_date.to_date_string())
                continue

            for candidate in candidate_ranges(anchored, now, duration):
                if candidate.end <= now:
                    continue

                if any(candidate.overlaps(busy_range) for busy_range in busy):
                    continue

                slots.append(
                    AvailableSlot(
                        start=candidate.start,
                        end=candidate.end,
                        display_label=candidate.start.format(self.label_format)
                    )
                )

        if not slots:
            logger.debug(
                "Provider %s is fully booked on %s",
                provider.id, target_date.to_date_string()
            )

        return slots
