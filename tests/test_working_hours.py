"""
Tests for working hours parsing.
"""

import json
from datetime import time

import pendulum
import pytest

from queuewise.domain.models import Company, DailyWindow, WeeklyHours
from queuewise.domain.working_hours import (
    WorkingHoursParser,
    day_range,
    opening_window,
    parse_working_hours,
)

TZ = "Europe/Berlin"

SPLIT_MONDAY = {
    "1": [
        {"start": "09:00", "end": "12:00"},
        {"start": "13:00", "end": "17:00"},
    ]
}

MORNING = DailyWindow(start=time(9, 0), end=time(12, 0))
AFTERNOON = DailyWindow(start=time(13, 0), end=time(17, 0))


class TestParse:
    """Tests for WorkingHoursParser.parse."""

    def test_parse_string_keys(self):
        """Test parsing a day-indexed map with string keys."""
        hours = WorkingHoursParser().parse(SPLIT_MONDAY)

        assert hours.for_weekday(1) == (MORNING, AFTERNOON)
        for day in (0, 2, 3, 4, 5, 6):
            assert hours.for_weekday(day) == ()

    def test_parse_integer_keys(self):
        hours = parse_working_hours({6: [{"start": "10:00", "end": "14:00"}]})

        assert hours.for_weekday(6) == (DailyWindow(start=time(10, 0), end=time(14, 0)),)

    def test_parse_json_text(self):
        """Test that schedules stored as JSON text are decoded first."""
        hours = parse_working_hours(json.dumps(SPLIT_MONDAY))

        assert hours.for_weekday(1) == (MORNING, AFTERNOON)

    def test_parse_summary_text(self):
        """Test that non-JSON text is read as a "HH:mm - HH:mm, Day - Day" summary."""
        hours = parse_working_hours("09:00 - 17:00, Monday - Friday")

        assert hours.for_weekday(1) == (DailyWindow(start=time(9, 0), end=time(17, 0)),)
        assert hours.for_weekday(0) == ()

    def test_parse_seven_day_sequence(self):
        days = [[] for _ in range(7)]
        days[3] = [{"start": "08:30", "end": "16:00"}]

        hours = parse_working_hours(days)

        assert hours.for_weekday(3) == (DailyWindow(start=time(8, 30), end=time(16, 0)),)

    def test_weekly_hours_pass_through(self):
        hours = WeeklyHours.empty()

        assert parse_working_hours(hours) is hours

    @pytest.mark.parametrize("raw", [None, "", "not json", "[1, 2]", 42, [], {"1": "09:00-17:00"}])
    def test_malformed_input_is_closed(self, raw):
        """Test that malformed input degrades to no hours instead of raising."""
        assert parse_working_hours(raw).is_closed()

    def test_malformed_range_is_dropped_from_its_day(self):
        """Test that one bad range does not reject the whole day."""
        hours = parse_working_hours({
            "1": [
                {"start": "09:00", "end": "noon"},
                {"start": "13:00", "end": "17:00"},
                {"start": 9, "end": "10:00"},
                "09:00-10:00",
                {"start": "18:00"},
            ]
        })

        assert hours.for_weekday(1) == (AFTERNOON,)

    def test_inverted_range_is_dropped(self):
        hours = parse_working_hours({"2": [{"start": "17:00", "end": "09:00"}, {"start": "10:00", "end": "10:00"}]})

        assert hours.for_weekday(2) == ()

    def test_unsorted_ranges_are_sorted(self):
        hours = parse_working_hours({"1": list(reversed(SPLIT_MONDAY["1"]))})

        assert hours.for_weekday(1) == (MORNING, AFTERNOON)

    def test_unknown_day_keys_are_ignored(self):
        hours = parse_working_hours({
            "7": [{"start": "09:00", "end": "17:00"}],
            "mon": [{"start": "09:00", "end": "17:00"}],
            "-1": [{"start": "09:00", "end": "17:00"}],
            "5": [{"start": "09:00", "end": "17:00"}],
        })

        assert hours.for_weekday(5) == (DailyWindow(start=time(9, 0), end=time(17, 0)),)
        assert sum(1 for day in hours.days if day) == 1


class TestParseSummary:
    """Tests for the free-text working hours summary."""

    def test_weekday_span(self):
        hours = WorkingHoursParser().parse_summary("09:00 - 17:00, Monday - Friday")

        for day in range(1, 6):
            assert hours.for_weekday(day) == (DailyWindow(start=time(9, 0), end=time(17, 0)),)
        assert hours.for_weekday(0) == ()
        assert hours.for_weekday(6) == ()

    def test_span_wraps_past_saturday(self):
        hours = WorkingHoursParser().parse_summary("10:00-18:00, Friday - Monday")

        assert [bool(day) for day in hours.days] == [True, True, False, False, False, True, True]

    def test_listed_days(self):
        hours = WorkingHoursParser().parse_summary("10:00 - 14:00, Saturday, Sunday")

        assert [bool(day) for day in hours.days] == [True, False, False, False, False, False, True]

    def test_without_days_every_day_is_open(self):
        hours = WorkingHoursParser().parse_summary("08:00 - 20:00")

        assert all(hours.days)

    @pytest.mark.parametrize("text", [None, "", "open all day", "17:00 - 09:00, Monday - Friday"])
    def test_unparseable_summary_is_closed(self, text):
        assert WorkingHoursParser().parse_summary(text).is_closed()


class TestDayHelpers:
    """Tests for day_range and opening_window."""

    def test_day_range_covers_calendar_day(self):
        day = day_range(pendulum.parse("2024-11-25 14:30", tz=TZ))

        assert day.start == pendulum.parse("2024-11-25 00:00", tz=TZ)
        assert day.end.to_date_string() == "2024-11-25"
        assert day.end.hour == 23
        assert day.end.minute == 59

    def test_opening_window_is_first_window(self):
        company = Company(id="c1", working_hours=SPLIT_MONDAY)

        window = opening_window(company, pendulum.parse("2024-11-25 15:00", tz=TZ))

        assert window is not None
        assert window.start == pendulum.parse("2024-11-25 09:00", tz=TZ)
        assert window.end == pendulum.parse("2024-11-25 12:00", tz=TZ)

    def test_opening_window_closed_day(self):
        company = Company(id="c1", working_hours=SPLIT_MONDAY)

        assert opening_window(company, pendulum.parse("2024-11-24", tz=TZ)) is None

    def test_opening_window_skips_hour_lost_to_clock_change(self):
        company = Company(
            id="c1",
            working_hours={"0": [{"start": "02:00", "end": "03:00"}, {"start": "09:00", "end": "10:00"}]}
        )

        window = opening_window(company, pendulum.parse("2024-03-31 08:00", tz=TZ))

        assert window.start == pendulum.parse("2024-03-31 09:00", tz=TZ)
