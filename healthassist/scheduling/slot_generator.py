"""
Candidate slot generation across business days.

Slots are derived, never stored: the same ``(today, config)`` pair always
yields the same sequence, so callers can iterate the generator again rather
than caching its output.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterator
from zoneinfo import ZoneInfo

from healthassist.config import SchedulingConfig
from healthassist.schemas.booking_schema import TimeSlot

WEEKEND = (5, 6)  # Saturday, Sunday


def is_business_day(day: date) -> bool:
    return day.weekday() not in WEEKEND


def slots_for_day(
    day: date,
    zone: ZoneInfo,
    start_hour: int,
    end_hour: int,
    duration_minutes: int,
) -> Iterator[TimeSlot]:
    """Yield back-to-back slots from ``start_hour:00`` that end no later than ``end_hour:00``."""
    closing = datetime.combine(day, time(0), tzinfo=zone) + timedelta(hours=end_hour)
    cursor = datetime.combine(day, time(start_hour), tzinfo=zone)
    step = timedelta(minutes=duration_minutes)
    while cursor + step <= closing:
        yield TimeSlot.starting_at(cursor, duration_minutes)
        cursor += step


class SlotGenerator:
    """Lazy, restartable sequence of candidate slots from tomorrow onward.

    Covers the calendar days ``today + 1`` through ``today + days_ahead``;
    Saturdays and Sundays contribute no slots.
    """

    def __init__(self, config: SchedulingConfig, today: date) -> None:
        self.zone = ZoneInfo(config.timezone)
        self.today = today
        self.start_hour = config.business_hours_start
        self.end_hour = config.business_hours_end
        self.duration_minutes = config.slot_duration_minutes
        self.days_ahead = config.days_ahead

    @property
    def range_start(self) -> datetime:
        """Midnight at the start of tomorrow, the first instant the window covers."""
        return datetime.combine(self.today + timedelta(days=1), time(0), tzinfo=self.zone)

    @property
    def range_end(self) -> datetime:
        """Midnight after the last covered day (exclusive)."""
        return datetime.combine(
            self.today + timedelta(days=self.days_ahead + 1), time(0), tzinfo=self.zone
        )

    def days(self) -> Iterator[date]:
        for offset in range(1, self.days_ahead + 1):
            day = self.today + timedelta(days=offset)
            if is_business_day(day):
                yield day

    def __iter__(self) -> Iterator[TimeSlot]:
        for day in self.days():
            yield from slots_for_day(
                day, self.zone, self.start_hour, self.end_hour, self.duration_minutes
            )
