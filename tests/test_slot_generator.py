"""Tests for candidate slot generation."""

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from healthassist.scheduling.slot_generator import SlotGenerator, is_business_day, slots_for_day
from healthassist.schemas.booking_schema import TimeSlot
from tests.conftest import ZONE

FRIDAY = date(2026, 10, 16)
MONDAY = date(2026, 10, 19)
TZ = ZoneInfo(ZONE)


class TestBusinessDays:
    def test_weekdays_are_business_days(self):
        assert all(is_business_day(MONDAY + timedelta(days=i)) for i in range(5))

    def test_weekend_is_not(self):
        assert not is_business_day(date(2026, 10, 17))
        assert not is_business_day(date(2026, 10, 18))


class TestSlotsForDay:
    def test_twenty_minute_grid_fills_business_hours(self):
        slots = list(slots_for_day(MONDAY, TZ, 9, 17, 20))
        assert len(slots) == 24
        assert slots[0].start == datetime(2026, 10, 19, 9, 0, tzinfo=TZ)
        assert slots[-1].start == datetime(2026, 10, 19, 16, 40, tzinfo=TZ)
        assert slots[-1].end == datetime(2026, 10, 19, 17, 0, tzinfo=TZ)

    def test_no_slot_overruns_closing(self):
        slots = list(slots_for_day(MONDAY, TZ, 9, 17, 45))
        assert len(slots) == 10
        assert slots[-1].end.time() == time(16, 30)
        assert all(s.end <= datetime(2026, 10, 19, 17, 0, tzinfo=TZ) for s in slots)

    def test_slots_are_back_to_back(self):
        slots = list(slots_for_day(MONDAY, TZ, 9, 17, 20))
        assert all(a.end == b.start for a, b in zip(slots, slots[1:]))


class TestSlotGenerator:
    def test_friday_rolls_over_weekend_to_monday(self, scheduling_config):
        config = replace(scheduling_config, days_ahead=3)
        slots = list(SlotGenerator(config, FRIDAY))

        assert {s.start.date() for s in slots} == {MONDAY}
        assert (slots[0].start.time(), slots[0].end.time()) == (time(9, 0), time(9, 20))
        assert (slots[-1].start.time(), slots[-1].end.time()) == (time(16, 40), time(17, 0))

    def test_window_of_one_day_from_friday_is_saturday_only(self, scheduling_config):
        config = replace(scheduling_config, days_ahead=1)
        assert list(SlotGenerator(config, FRIDAY)) == []

    def test_no_weekend_slots_over_two_weeks(self, scheduling_config):
        slots = list(SlotGenerator(scheduling_config, FRIDAY))
        assert all(s.start.weekday() < 5 for s in slots)
        assert len({s.start.date() for s in slots}) == 10
        assert len(slots) == 240

    def test_starts_tomorrow_not_today(self, scheduling_config):
        monday_config = replace(scheduling_config, days_ahead=2)
        slots = list(SlotGenerator(monday_config, MONDAY))
        assert min(s.start.date() for s in slots) == MONDAY + timedelta(days=1)

    def test_every_slot_ends_by_closing(self, scheduling_config):
        for duration in (20, 60, 35):
            config = replace(scheduling_config, slot_duration_minutes=duration)
            for slot in SlotGenerator(config, FRIDAY):
                closing = datetime.combine(slot.start.date(), time(17), tzinfo=TZ)
                assert slot.end <= closing
                assert slot.duration_minutes == duration

    def test_iteration_is_restartable(self, scheduling_config):
        generator = SlotGenerator(scheduling_config, FRIDAY)
        assert list(generator) == list(generator)

    def test_output_is_chronological(self, scheduling_config):
        starts = [s.start for s in SlotGenerator(scheduling_config, FRIDAY)]
        assert starts == sorted(starts)

    def test_query_range_covers_window(self, scheduling_config):
        generator = SlotGenerator(scheduling_config, FRIDAY)
        assert generator.range_start == datetime(2026, 10, 17, 0, 0, tzinfo=TZ)
        assert generator.range_end == datetime(2026, 10, 31, 0, 0, tzinfo=TZ)


class TestTimeSlot:
    def test_end_must_match_duration(self):
        start = datetime(2026, 10, 19, 9, 0, tzinfo=TZ)
        with pytest.raises(ValueError):
            TimeSlot(start, start + timedelta(minutes=30), 20)

    def test_starting_at(self):
        start = datetime(2026, 10, 19, 9, 0, tzinfo=TZ)
        slot = TimeSlot.starting_at(start, 60)
        assert slot.end - slot.start == timedelta(minutes=60)

    def test_is_immutable(self):
        slot = TimeSlot.starting_at(datetime(2026, 10, 19, 9, 0, tzinfo=TZ), 20)
        with pytest.raises(AttributeError):
            slot.duration_minutes = 60
