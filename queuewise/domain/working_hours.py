"""
Parsing of stored weekly operating hours into ``WeeklyHours``.

Stored schedules are day-indexed maps (0=Sunday ... 6=Saturday) of
``{"start": "HH:mm", "end": "HH:mm"}`` ranges, often still as JSON text.
Older records hold a free-text summary like
``"09:00 - 17:00, Monday - Friday"`` instead. Parsing never raises:
anything unusable degrades to "closed".
"""

import json
import logging
import re
from collections.abc import Mapping
from datetime import time
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from .models import (
    DAYS_PER_WEEK,
    WEEKDAY_NAMES,
    Company,
    DailyWindow,
    TimeRange,
    WeeklyHours,
)

logger = logging.getLogger(__name__)

_SUMMARY_TIMES = re.compile(r"(\d{2}:\d{2})\s*-\s*(\d{2}:\d{2})")
_DAY_PATTERN = "|".join(WEEKDAY_NAMES)
_SUMMARY_DAY_SPAN = re.compile(rf"({_DAY_PATTERN})\s*-\s*({_DAY_PATTERN})", re.IGNORECASE)
_SUMMARY_DAY = re.compile(rf"\b({_DAY_PATTERN})\b", re.IGNORECASE)


class WorkingHoursParser:
    """
    Converts stored weekly schedules into ``WeeklyHours``.

    Each range is parsed on its own, so one malformed range only removes
    itself from its day. Ranges are returned sorted by start time.
    """

    TIME_FORMAT = "HH:mm"

    def parse(self, raw: Any) -> WeeklyHours:
        """
        Parse a stored schedule.

        Args:
            raw: Day-indexed mapping (int or digit-string keys), its JSON
                text, a seven-item sequence, a free-text summary such as
                ``"09:00 - 17:00, Monday - Friday"``, or an existing
                ``WeeklyHours``

        Returns:
            Parsed weekly hours; empty for missing or malformed input
        """
        if isinstance(raw, WeeklyHours):
            return raw

        if raw is None:
            return WeeklyHours.empty()

        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.debug("Working hours are not JSON, reading them as a summary")
                if isinstance(raw, bytes):
                    raw = raw.decode("utf-8", errors="replace")
                return self.parse_summary(raw)

        if isinstance(raw, Mapping):
            items = list(raw.items())
        elif isinstance(raw, (list, tuple)) and len(raw) == DAYS_PER_WEEK:
            items = list(enumerate(raw))
        else:
            logger.warning("Unsupported working hours structure: %r", type(raw).__name__)
            return WeeklyHours.empty()

        days: Dict[int, List[DailyWindow]] = {}

        for key, ranges in items:
            index = self._day_index(key)
            if index is None:
                logger.warning("Ignoring working hours for unknown day key %r", key)
                continue

            if not isinstance(ranges, (list, tuple)):
                logger.warning("Working hours for day %s must be a list, got %r", index, ranges)
                continue

            windows = days.setdefault(index, [])
            for entry in ranges:
                window = self._parse_range(entry)
                if window is None:
                    logger.warning("Dropping invalid shift for day %s: %r", index, entry)
                    continue
                windows.append(window)

        return self._build(days)

    def parse_summary(self, text: Optional[str]) -> WeeklyHours:
        """
        Parse a free-text summary such as ``"09:00 - 17:00, Monday - Friday"``.

        The first time pair becomes the single window. A weekday span (which
        may wrap past Saturday) or a list of weekday names limits the open
        days; without any weekday names every day is open.
        """
        if not text or not isinstance(text, str):
            return WeeklyHours.empty()

        match = _SUMMARY_TIMES.search(text)
        if not match:
            logger.warning("Could not parse working hours summary: %r", text)
            return WeeklyHours.empty()

        window = self._window_from_strings(match.group(1), match.group(2))
        if window is None:
            logger.warning("Invalid time range in working hours summary: %r", text)
            return WeeklyHours.empty()

        remainder = text[match.end():]
        open_days = self._summary_days(remainder)

        return self._build({day: [window] for day in open_days})

    def _summary_days(self, text: str) -> List[int]:
        span = _SUMMARY_DAY_SPAN.search(text)
        if span:
            first = self._day_from_name(span.group(1))
            last = self._day_from_name(span.group(2))
            length = (last - first) % DAYS_PER_WEEK + 1
            return [(first + offset) % DAYS_PER_WEEK for offset in range(length)]

        named = [self._day_from_name(name) for name in _SUMMARY_DAY.findall(text)]
        if named:
            return sorted(set(named))

        return list(range(DAYS_PER_WEEK))

    @staticmethod
    def _day_from_name(name: str) -> int:
        return [day.lower() for day in WEEKDAY_NAMES].index(name.lower())

    @staticmethod
    def _day_index(key: Any) -> Optional[int]:
        if isinstance(key, bool):
            return None
        if isinstance(key, str):
            key = key.strip()
            if not key.isdigit():
                return None
            key = int(key)
        if isinstance(key, int) and 0 <= key < DAYS_PER_WEEK:
            return key
        return None

    def _parse_range(self, entry: Any) -> Optional[DailyWindow]:
        if not isinstance(entry, Mapping):
            return None
        return self._window_from_strings(entry.get("start"), entry.get("end"))

    def _window_from_strings(self, start: Any, end: Any) -> Optional[DailyWindow]:
        start_time = self._parse_time(start)
        end_time = self._parse_time(end)

        if start_time is None or end_time is None or start_time >= end_time:
            return None

        return DailyWindow(start=start_time, end=end_time)

    def _parse_time(self, value: Any) -> Optional[time]:
        if not isinstance(value, str):
            return None
        try:
            parsed = pendulum.from_format(value.strip(), self.TIME_FORMAT)
        except ValueError:
            return None
        return time(hour=parsed.hour, minute=parsed.minute)

    @staticmethod
    def _build(days: Dict[int, List[DailyWindow]]) -> WeeklyHours:
        return WeeklyHours(
            days=tuple(
                tuple(sorted(days.get(index, []), key=lambda window: window.start))
                for index in range(DAYS_PER_WEEK)
            )
        )


def parse_working_hours(raw: Any) -> WeeklyHours:
    """Module-level shortcut for ``WorkingHoursParser().parse``."""
    return WorkingHoursParser().parse(raw)


def day_range(day: DateTime) -> TimeRange:
    """Return the range from the start to the end of ``day``'s calendar day."""
    return TimeRange(start=day.start_of("day"), end=day.end_of("day"))


def opening_window(company: Company, day: DateTime) -> Optional[TimeRange]:
    """
    Return the first working-hours window of ``day`` anchored on that date.

    Returns None if the company is closed that day. Windows that do not
    exist on ``day`` (skipped by a DST change) are passed over.
    """
    for window in parse_working_hours(company.working_hours).for_date(day):
        anchored = window.anchor(day)
        if anchored is not None:
            return anchored
    return None
