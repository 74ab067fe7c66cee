"""
Live availability derived from the booking calendar's free/busy state.

There is no local availability cache: every query generates the candidate
grid, fetches a fresh busy snapshot, and keeps the slots that share no
instant with any busy interval.
"""

import logging
from datetime import datetime
from typing import Iterable

from googleapiclient.errors import HttpError

from healthassist.clock import ZoneClock
from healthassist.config import SchedulingConfig
from healthassist.errors import CalendarUnavailable, NotConfigured
from healthassist.scheduling.calendar_gateway import GoogleCalendarGateway
from healthassist.scheduling.slot_generator import SlotGenerator
from healthassist.schemas.booking_schema import (
    AvailabilityResult,
    AvailabilityStatus,
    BusyInterval,
    SlotView,
    TimeSlot,
)
from healthassist.utils import DAY_NAMES, format_display_time

logger = logging.getLogger(__name__)


def _parse_instant(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def overlaps(slot: TimeSlot, busy: BusyInterval) -> bool:
    """Half-open overlap: touching endpoints do not conflict."""
    return slot.start < busy.end and slot.end > busy.start


def compute_available(
    slots: Iterable[TimeSlot], busy_intervals: Iterable[BusyInterval]
) -> list[TimeSlot]:
    """Keep the slots that overlap no busy interval, in chronological order."""
    busy = list(busy_intervals)
    free = [s for s in slots if not any(overlaps(s, b) for b in busy)]
    return sorted(free, key=lambda s: s.start)


def to_slot_view(slot: TimeSlot) -> SlotView:
    return SlotView(
        start=slot.start.isoformat(),
        end=slot.end.isoformat(),
        date=slot.start.date().isoformat(),
        display_time=format_display_time(slot.start),
        day_of_week=DAY_NAMES[slot.start.weekday()],
    )


class BusyIntervalFetcher:
    """Fetches busy intervals for the configured calendar identity.

    Raises ``CalendarUnavailable`` (or its ``NotConfigured`` subclass) when
    the calendar cannot answer. An empty list means no conflicts.
    """

    def __init__(self, gateway: GoogleCalendarGateway):
        self.gateway = gateway

    async def fetch(self, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        try:
            entry = await self.gateway.query_free_busy(range_start, range_end)
        except CalendarUnavailable:
            raise
        except HttpError as e:
            raise CalendarUnavailable(f"Free/busy query rejected: {e.resp.status}") from e
        except Exception as e:
            raise CalendarUnavailable(f"Free/busy query failed: {e}") from e

        errors = entry.get("errors")
        if errors:
            reasons = ", ".join(str(err.get("reason", "unknown")) for err in errors)
            raise CalendarUnavailable(f"Calendar reported errors: {reasons}")

        intervals = []
        for period in entry.get("busy", []):
            try:
                intervals.append(
                    BusyInterval(_parse_instant(period["start"]), _parse_instant(period["end"]))
                )
            except (KeyError, ValueError) as e:
                raise CalendarUnavailable(f"Malformed busy period {period!r}") from e
        return intervals


class AvailabilityCalculator:
    """Intersects the generated slot grid with the calendar's busy intervals."""

    def __init__(self, config: SchedulingConfig, fetcher: BusyIntervalFetcher, clock: ZoneClock):
        self.config = config
        self.fetcher = fetcher
        self.clock = clock

    async def get_available_slots(self) -> AvailabilityResult:
        """Return bookable slots, or a status explaining why there are none.

        A calendar failure never raises: it is reported as
        ``calendar_unavailable`` (or ``not_configured``), distinct from
        ``fully_booked``.
        """
        generator = SlotGenerator(self.config, self.clock.today())
        try:
            busy = await self.fetcher.fetch(generator.range_start, generator.range_end)
        except NotConfigured as e:
            logger.warning("Calendar not configured: %s", e)
            return AvailabilityResult(
                status=AvailabilityStatus.NOT_CONFIGURED,
                message="Online scheduling is not available right now.",
            )
        except CalendarUnavailable as e:
            logger.error("Failed to fetch busy intervals: %s", e)
            return AvailabilityResult(
                status=AvailabilityStatus.CALENDAR_UNAVAILABLE,
                message="We couldn't reach the calendar. Please try again shortly.",
            )

        available = compute_available(generator, busy)
        if not available:
            return AvailabilityResult(
                status=AvailabilityStatus.FULLY_BOOKED,
                message=f"No open times in the next {self.config.days_ahead} days.",
            )

        logger.debug("%d slots available across %d busy intervals", len(available), len(busy))
        return AvailabilityResult(
            status=AvailabilityStatus.AVAILABLE,
            slots=[to_slot_view(s) for s in available],
            message=f"{len(available)} time slots available.",
        )
