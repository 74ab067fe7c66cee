"""Google Calendar client for the booking calendar."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from healthassist.config import SchedulingConfig
from healthassist.errors import CalendarUnavailable, NotConfigured

logger = logging.getLogger(__name__)


class GoogleCalendarGateway:
    """Thin async wrapper over the Calendar v3 API using a service account.

    The API client is synchronous, so every call runs in a worker thread.
    """

    SCOPES = ["https://www.googleapis.com/auth/calendar"]

    def __init__(self, config: SchedulingConfig, service: Any = None):
        self.config = config
        self.calendar_id = config.calendar_email
        self.service: Any = service

    @property
    def configured(self) -> bool:
        return self.service is not None or self.config.calendar_configured

    def connect(self) -> None:
        """Initialize the Calendar service from the service account key."""
        try:
            creds = service_account.Credentials.from_service_account_file(
                self.config.service_account_key_path, scopes=self.SCOPES
            )
            self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)
            logger.info("Google Calendar service initialized for: %s", self.calendar_id)
        except Exception as e:
            logger.error("Failed to initialize Google Calendar service: %s", e)
            raise CalendarUnavailable(f"Calendar service could not be initialized: {e}") from e

    def _ensure_connected(self) -> Any:
        if not self.calendar_id:
            raise NotConfigured("No booking calendar configured")
        if self.service is None:
            if not self.config.service_account_key_path:
                raise NotConfigured("No service account key configured")
            self.connect()
        return self.service

    async def query_free_busy(
        self,
        range_start: datetime,
        range_end: datetime,
        identity: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the raw free/busy entry for one calendar identity."""
        service = self._ensure_connected()
        calendar_id = identity or self.calendar_id
        body = {
            "timeMin": range_start.isoformat(),
            "timeMax": range_end.isoformat(),
            "timeZone": self.config.timezone,
            "items": [{"id": calendar_id}],
        }
        response = await asyncio.to_thread(service.freebusy().query(body=body).execute)
        return response.get("calendars", {}).get(calendar_id, {})

    async def insert_event(
        self, event_data: Dict[str, Any], identity: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create a new calendar event."""
        service = self._ensure_connected()
        request = service.events().insert(calendarId=identity or self.calendar_id, body=event_data)
        event = await asyncio.to_thread(request.execute)
        logger.info("Created event: %s", event.get("htmlLink"))
        return event

    async def get_event(self, event_id: str, identity: Optional[str] = None) -> Dict[str, Any]:
        service = self._ensure_connected()
        request = service.events().get(calendarId=identity or self.calendar_id, eventId=event_id)
        return await asyncio.to_thread(request.execute)
