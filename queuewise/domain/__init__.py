"""
Domain layer - Availability and queue-estimation engine without external dependencies.
"""

from .intervals import merge_intervals
from .models import (
    AvailableSlot,
    Booking,
    BookingStatus,
    Company,
    DailyWindow,
    Provider,
    QueueEntry,
    QueueEntryStatus,
    QueueEstimate,
    Service,
    TimeRange,
    WeeklyHours,
)
from .queue_estimator import QueueEstimator
from .slot_generator import SlotGenerator
from .working_hours import WorkingHoursParser, day_range, opening_window, parse_working_hours

__all__ = [
    "AvailableSlot",
    "Booking",
    "BookingStatus",
    "Company",
    "DailyWindow",
    "Provider",
    "QueueEntry",
    "QueueEntryStatus",
    "QueueEstimate",
    "QueueEstimator",
    "Service",
    "SlotGenerator",
    "TimeRange",
    "WeeklyHours",
    "WorkingHoursParser",
    "day_range",
    "merge_intervals",
    "opening_window",
    "parse_working_hours",
]
