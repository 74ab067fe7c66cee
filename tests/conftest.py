"""Shared test fixtures and helpers."""

import hashlib
import hmac
import json
import time
from datetime import datetime
from types import SimpleNamespace
from typing import Optional
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from healthassist.clock import ZoneClock
from healthassist.config import AppConfig, MailConfig, PaymentConfig, SchedulingConfig, WebhookConfig
from healthassist.schemas.booking_schema import BookingRequest

ZONE = "America/Los_Angeles"
CALENDAR_ID = "clinic@example.com"
WEBHOOK_SECRET = "whsec_test_secret"

# 2026-10-16 is a Friday; the next business day is Monday 2026-10-19 (PDT, UTC-7).
FRIDAY_MORNING = datetime(2026, 10, 16, 10, 0)


@pytest.fixture
def scheduling_config() -> SchedulingConfig:
    return SchedulingConfig(
        calendar_email=CALENDAR_ID,
        service_account_key_path="/secrets/calendar-key.json",
        timezone=ZONE,
        business_hours_start=9,
        business_hours_end=17,
        slot_duration_minutes=20,
        paid_duration_minutes=60,
        days_ahead=14,
        recheck_before_booking=False,
        brand_name="Zumanely",
    )


@pytest.fixture
def payment_config() -> PaymentConfig:
    return PaymentConfig(
        secret_key="sk_test_123",
        webhook_secret=WEBHOOK_SECRET,
        price_cents=1999,
        currency="usd",
        success_url="https://app.example.com?payment=success&session_id={CHECKOUT_SESSION_ID}",
        cancel_url="https://app.example.com?payment=cancelled",
        product_name="1-Hour Specialist Consultation",
        product_description="Full hour session with a healthcare specialist",
    )


@pytest.fixture
def mail_config() -> MailConfig:
    return MailConfig(
        smtp_host="smtp.example.com",
        smtp_port=587,
        username="mailer",
        password="secret",
        use_tls=True,
        from_email="bookings@example.com",
        cc_email="clinic@example.com",
        contact_footer="Zumanely | (408) 982-6644",
    )


@pytest.fixture
def app_config(scheduling_config, payment_config, mail_config) -> AppConfig:
    return AppConfig(
        scheduling=scheduling_config,
        payment=payment_config,
        webhook=WebhookConfig(dedup_ttl_seconds=3600, dedup_max_entries=100),
        mail=mail_config,
        log_level="INFO",
        app_name="healthassist-test",
    )


@pytest.fixture
def friday_clock() -> ZoneClock:
    return ZoneClock(ZONE, now_fn=lambda tz: FRIDAY_MORNING.replace(tzinfo=tz))


@pytest.fixture
def mock_calendar_service():
    """A MagicMock standing in for the Calendar v3 service object."""
    service = MagicMock()
    service.freebusy.return_value.query.return_value.execute.return_value = {
        "calendars": {CALENDAR_ID: {"busy": []}}
    }
    service.events.return_value.insert.return_value.execute.return_value = {
        "id": "evt_123",
        "htmlLink": "https://calendar.google.com/event?eid=evt_123",
    }
    return service


def set_busy(service: MagicMock, *periods: tuple[str, str]) -> None:
    service.freebusy.return_value.query.return_value.execute.return_value = {
        "calendars": {CALENDAR_ID: {"busy": [{"start": s, "end": e} for s, e in periods]}}
    }


def inserted_body(service: MagicMock) -> dict:
    return service.events.return_value.insert.call_args.kwargs["body"]


def make_http_error(status: int, message: str = "upstream error") -> HttpError:
    resp = SimpleNamespace(status=status, reason=message)
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content)


def make_request(
    slot_start: str = "2026-10-19T09:00:00-07:00",
    name: str = "Jane Doe",
    email: str = "jane@example.com",
    **kwargs,
) -> BookingRequest:
    return BookingRequest(slot_start=slot_start, client_name=name, client_email=email, **kwargs)


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhook deliveries."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def checkout_completed_payload(
    session_id: str = "cs_test_abc",
    event_id: str = "evt_1",
    metadata: Optional[dict] = None,
    event_type: str = "checkout.session.completed",
) -> bytes:
    if metadata is None:
        metadata = {
            "customerName": "Jane Doe",
            "customerEmail": "jane@example.com",
            "customerPhone": "4089826644",
            "slotStart": "2026-10-19T10:00:00-07:00",
            "displayDateTime": "Monday, Oct 19 at 10:00 AM",
            "service": "Nutrition",
            "message": "",
            "sessionType": "paid-60",
        }
    event = {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": {"id": session_id, "object": "checkout.session", "metadata": metadata}},
    }
    return json.dumps(event).encode("utf-8")
