"""
Domain models for working hours, commitments and bookable slots.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Any, Optional, Tuple

from pendulum import DateTime

DAYS_PER_WEEK = 7

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def weekday_index(dt: DateTime) -> int:
    """Return the weekday of ``dt`` as 0=Sunday ... 6=Saturday."""
    return dt.isoweekday() % DAYS_PER_WEEK


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Ranges are half-open: a range ending at 10:00 does not overlap one
    starting at 10:00.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class DailyWindow:
    """
    One open/close pair of a weekday, as time of day without a date.

    Invariant: start must be before end.
    """
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Window start {self.start} must be before end {self.end}")

    def anchor(self, day: DateTime) -> Optional[TimeRange]:
        """
        Place this window on the calendar day of ``day``.

        Returns None when the window collapses on that date, e.g. a
        02:00-03:00 window on a day where the clocks jump from 02:00 to 03:00.
        """
        start = day.set(
            hour=self.start.hour,
            minute=self.start.minute,
            second=0,
            microsecond=0
        )
        end = day.set(
            hour=self.end.hour,
            minute=self.end.minute,
            second=0,
            microsecond=0
        )
        if start >= end:
            return None
        return TimeRange(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"


@dataclass(frozen=True)
class WeeklyHours:
    """
    Operating hours for a week, one tuple of windows per weekday.

    ``days[0]`` is Sunday and ``days[6]`` is Saturday. A weekday with no
    windows is closed.
    """
    days: Tuple[Tuple[DailyWindow, ...], ...] = ((),) * DAYS_PER_WEEK

    def __post_init__(self):
        if len(self.days) != DAYS_PER_WEEK:
            raise ValueError(f"WeeklyHours needs {DAYS_PER_WEEK} days, got {len(self.days)}")

    @classmethod
    def empty(cls) -> "WeeklyHours":
        return cls()

    def for_weekday(self, index: int) -> Tuple[DailyWindow, ...]:
        """Return the windows for weekday ``index`` (0=Sunday)."""
        if not 0 <= index < DAYS_PER_WEEK:
            return ()
        return self.days[index]

    def for_date(self, day: DateTime) -> Tuple[DailyWindow, ...]:
        return self.for_weekday(weekday_index(day))

    def is_closed(self) -> bool:
        """True when no weekday has any window."""
        return not any(self.days)


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class QueueEntryStatus(str, Enum):
    WAITING = "waiting"
    SERVING = "serving"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_QUEUE_STATUSES = frozenset({QueueEntryStatus.WAITING, QueueEntryStatus.SERVING})


@dataclass
class Company:
    """
    A business offering services.

    ``working_hours`` holds the weekly schedule as stored (a day-indexed
    mapping, its JSON text, or an already parsed ``WeeklyHours``).
    """
    id: str
    name: str = ""
    working_hours: Any = None


@dataclass
class Service:
    """A bookable service with a fixed duration per customer."""
    id: str
    name: str = ""
    estimated_duration_minutes: Optional[int] = None
    company_id: str = ""

    def duration_minutes(self) -> Optional[int]:
        """Return the duration if it is a positive integer, otherwise None."""
        value = self.estimated_duration_minutes
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return None
        return value


@dataclass
class Provider:
    """Person serving customers. Only the id matters for availability."""
    id: str
    name: str = ""
    company_id: str = ""


@dataclass
class Booking:
    """A scheduled appointment occupying a provider for a fixed range."""
    start_time: DateTime
    end_time: DateTime
    provider_id: Optional[str]
    status: BookingStatus = BookingStatus.CONFIRMED
    id: str = ""
    service_id: Optional[str] = None

    def blocks(self, provider_id: str) -> bool:
        """Whether this booking makes ``provider_id`` unavailable."""
        return self.status == BookingStatus.CONFIRMED and self.provider_id == provider_id

    def time_range(self) -> Optional[TimeRange]:
        """Return the booked range, or None if the times are inverted."""
        if self.start_time >= self.end_time:
            return None
        return TimeRange(start=self.start_time, end=self.end_time)


@dataclass
class QueueEntry:
    """A walk-in customer waiting for or receiving service, without a fixed time."""
    provider_id: Optional[str]
    status: QueueEntryStatus = QueueEntryStatus.WAITING
    id: str = ""
    service_id: Optional[str] = None
    position: Optional[int] = None

    def is_active(self) -> bool:
        return self.status in ACTIVE_QUEUE_STATUSES


DEFAULT_LABEL_FORMAT = "h:mm A"


@dataclass(frozen=True)
class AvailableSlot:
    """
    A bookable slot offered to a customer.

    ``end`` is always ``start`` plus the service duration.
    """
    start: DateTime
    end: DateTime
    display_label: str = field(default="", compare=False)


@dataclass(frozen=True)
class QueueEstimate:
    """Advisory position and start time for someone joining a queue now."""
    position: int
    estimated_start: Optional[DateTime]

    def format_display(self, label_format: str = DEFAULT_LABEL_FORMAT) -> str:
        if self.estimated_start is None:
            return f"Position {self.position} | no free time left today"
        return f"Position {self.position} | estimated start {self.estimated_start.format(label_format)}"
