"""
Tests for busy interval merging.
"""

import random

import pendulum

from queuewise.domain.intervals import blocked_ranges, merge_intervals
from queuewise.domain.models import Booking, BookingStatus, TimeRange

TZ = "Europe/Berlin"


def at(text: str):
    return pendulum.parse(f"2024-11-25 {text}", tz=TZ)


def rng(start: str, end: str) -> TimeRange:
    return TimeRange(start=at(start), end=at(end))


class TestMergeIntervals:
    """Tests for merge_intervals."""

    def test_empty_input(self):
        assert merge_intervals([]) == []

    def test_disjoint_ranges_are_sorted(self):
        merged = merge_intervals([rng("14:00", "15:00"), rng("09:00", "10:00")])

        assert merged == [rng("09:00", "10:00"), rng("14:00", "15:00")]

    def test_overlapping_ranges_are_merged(self):
        merged = merge_intervals([rng("09:00", "10:30"), rng("10:00", "11:00")])

        assert merged == [rng("09:00", "11:00")]

    def test_touching_ranges_are_merged(self):
        """Test that back-to-back ranges leave no zero-length gap."""
        merged = merge_intervals([rng("09:00", "10:00"), rng("10:00", "10:30")])

        assert merged == [rng("09:00", "10:30")]

    def test_nested_range_is_absorbed(self):
        merged = merge_intervals([rng("09:00", "12:00"), rng("10:00", "11:00"), rng("12:30", "13:00")])

        assert merged == [rng("09:00", "12:00"), rng("12:30", "13:00")]

    def test_result_is_sorted_disjoint_and_covers_union(self):
        """Merged output is sorted, separated by gaps and covers the same minutes."""
        generator = random.Random(7)
        day_start = at("08:00")
        intervals = []
        for _ in range(25):
            start = generator.randrange(0, 600, 5)
            length = generator.randrange(5, 90, 5)
            intervals.append(
                TimeRange(start=day_start.add(minutes=start), end=day_start.add(minutes=start + length))
            )

        merged = merge_intervals(intervals)

        for earlier, later in zip(merged, merged[1:]):
            assert earlier.end < later.start

        def covered(ranges):
            minutes = set()
            for r in ranges:
                offset = int((r.start - day_start).total_seconds() // 60)
                minutes.update(range(offset, offset + r.duration_minutes()))
            return minutes

        assert covered(merged) == covered(intervals)
        assert merge_intervals(reversed(intervals)) == merged


class TestBlockedRanges:
    """Tests for blocked_ranges."""

    def test_only_confirmed_bookings_of_provider(self):
        bookings = [
            Booking(start_time=at("09:00"), end_time=at("09:30"), provider_id="p1"),
            Booking(start_time=at("10:00"), end_time=at("10:30"), provider_id="p2"),
            Booking(
                start_time=at("11:00"),
                end_time=at("11:30"),
                provider_id="p1",
                status=BookingStatus.CANCELLED
            ),
            Booking(start_time=at("12:00"), end_time=at("11:30"), provider_id="p1", id="broken"),
        ]

        assert blocked_ranges(bookings, "p1") == [rng("09:00", "09:30")]
