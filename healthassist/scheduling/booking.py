"""
Calendar-backed booking creation.

Each successful call creates exactly one event on the booking calendar. The
executor does not lock the slot: the calendar is the only source of truth,
so two clients racing for the same slot can both succeed unless the
optional freshness re-check is enabled.
"""

import base64
import hashlib
import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from googleapiclient.errors import HttpError

from healthassist.config import SchedulingConfig
from healthassist.errors import CalendarUnavailable, ErrorCode, SlotNoLongerAvailable
from healthassist.scheduling.availability import BusyIntervalFetcher, overlaps
from healthassist.scheduling.calendar_gateway import GoogleCalendarGateway
from healthassist.schemas.booking_schema import BookingRequest, BookingResult, TimeSlot
from healthassist.utils import or_not_provided

logger = logging.getLogger(__name__)

HTTP_CONFLICT = 409


def event_id_for(idempotency_key: str) -> str:
    """Derive a stable Calendar event id (base32hex alphabet, lower case) from a key."""
    digest = hashlib.sha256(idempotency_key.encode("utf-8")).digest()
    return base64.b32hexencode(digest).decode("ascii").rstrip("=").lower()


class BookingExecutor:
    """Creates the calendar event for a confirmed slot and reports the outcome."""

    def __init__(
        self,
        config: SchedulingConfig,
        gateway: GoogleCalendarGateway,
        fetcher: Optional[BusyIntervalFetcher] = None,
    ):
        self.config = config
        self.zone = ZoneInfo(config.timezone)
        self.gateway = gateway
        self.fetcher = fetcher or BusyIntervalFetcher(gateway)

    def build_summary(
        self, request: BookingRequest, duration_minutes: int, paid: bool = False
    ) -> str:
        brand = self.config.brand_name
        if paid:
            length = "1hr" if duration_minutes == 60 else f"{duration_minutes} min"
            return f"{brand} PAID Consultation ({length}): {request.client_name}"
        return f"{brand} Consultation ({duration_minutes} min): {request.client_name}"

    def build_description(
        self, request: BookingRequest, duration_minutes: int, paid: bool = False
    ) -> str:
        lines = []
        if paid:
            lines.append(f"PAID {duration_minutes}-MINUTE SESSION")
        lines += [
            f"Client: {request.client_name}",
            f"Email: {request.client_email}",
            f"Phone: {or_not_provided(request.client_phone)}",
            f"Service: {or_not_provided(request.service)}",
            f"Message: {or_not_provided(request.message)}",
        ]
        return "\n".join(lines)

    def build_event(
        self,
        request: BookingRequest,
        start: datetime,
        end: datetime,
        duration_minutes: int,
        event_id: Optional[str] = None,
        paid: bool = False,
    ) -> dict[str, Any]:
        event: dict[str, Any] = {
            "summary": self.build_summary(request, duration_minutes, paid),
            "description": self.build_description(request, duration_minutes, paid),
            "start": {"dateTime": start.isoformat(), "timeZone": self.config.timezone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.config.timezone},
        }
        if event_id:
            event["id"] = event_id
        return event

    async def book(
        self,
        request: BookingRequest,
        duration_minutes: Optional[int] = None,
        idempotency_key: Optional[str] = None,
        paid: bool = False,
    ) -> BookingResult:
        """Create the event; never raises.

        With ``idempotency_key`` the event id is derived from the key, so a
        repeated call finds the existing event instead of creating a second
        one and reports ``duplicate=True``. ``paid`` marks the event as a paid
        consultation in its summary and description.
        """
        duration = duration_minutes or request.duration_minutes
        start = request.slot_start.astimezone(self.zone)
        end = start + timedelta(minutes=duration)
        event_id = event_id_for(idempotency_key) if idempotency_key else None

        try:
            if self.config.recheck_before_booking:
                await self._ensure_still_free(TimeSlot(start, end, duration))
            created = await self.gateway.insert_event(
                self.build_event(request, start, end, duration, event_id, paid)
            )
        except SlotNoLongerAvailable as e:
            existing = await self._find_existing(event_id, start, end)
            if existing is not None:
                return existing
            logger.info("Slot %s taken before booking for %s", start.isoformat(), request.client_email)
            return BookingResult.failure(str(e), e.code)
        except CalendarUnavailable as e:
            logger.error("Calendar unavailable while booking: %s", e)
            return BookingResult.failure(str(e), e.code)
        except HttpError as e:
            if e.resp.status == HTTP_CONFLICT and event_id:
                existing = await self._find_existing(event_id, start, end)
                if existing is not None:
                    return existing
            logger.error("Failed to book slot %s: %s", start.isoformat(), e)
            return BookingResult.failure(
                f"Calendar rejected the booking: {e.reason}", ErrorCode.BOOKING_FAILED
            )
        except Exception as e:
            logger.exception("Failed to book slot %s", start.isoformat())
            return BookingResult.failure(str(e) or type(e).__name__, ErrorCode.BOOKING_FAILED)

        logger.info(
            "Booking created: %s (%d min) for %s", created.get("id"), duration, request.client_email
        )
        return BookingResult(
            success=True,
            event_id=created.get("id"),
            confirmation_url=created.get("htmlLink"),
            start=start.isoformat(),
            end=end.isoformat(),
        )

    async def _ensure_still_free(self, slot: TimeSlot) -> None:
        busy = await self.fetcher.fetch(slot.start, slot.end)
        if any(overlaps(slot, b) for b in busy):
            raise SlotNoLongerAvailable(f"The {slot.start.isoformat()} slot is no longer available")

    async def _find_existing(
        self, event_id: Optional[str], start: datetime, end: datetime
    ) -> Optional[BookingResult]:
        """Read back an event created by an earlier attempt with the same key.

        A cancelled event does not count: the caller reports a failure.
        """
        if not event_id:
            return None
        try:
            event = await self.gateway.get_event(event_id)
        except Exception as e:
            logger.warning("Could not read back event %s: %s", event_id, e)
            return None
        if event.get("status") == "cancelled":
            logger.warning("Event %s exists but was cancelled; not a booking", event_id)
            return None
        logger.info("Event %s already exists; treating booking as duplicate", event_id)
        return BookingResult(
            success=True,
            event_id=event.get("id", event_id),
            confirmation_url=event.get("htmlLink"),
            start=start.isoformat(),
            end=end.isoformat(),
            duplicate=True,
        )
