"""Tests for the HTTP routes."""

from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from healthassist.api import create_app
from healthassist.container import build_container
from tests.conftest import checkout_completed_payload, inserted_body, make_http_error, sign_payload


@pytest.fixture
def mailer():
    mailer = MagicMock()
    mailer.configured = True
    return mailer


@pytest.fixture
def client(app_config, mock_calendar_service, friday_clock, mailer):
    container = build_container(
        app_config, calendar_service=mock_calendar_service, clock=friday_clock, mailer=mailer
    )
    return TestClient(create_app(container))


BOOK_BODY = {
    "startTime": "2026-10-19T09:00:00-07:00",
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane@example.com",
    "phone": "(408) 982-6644",
    "service": "Nutrition",
    "displayDateTime": "Monday, Oct 19 at 9:00 AM",
}


class TestHealth:
    def test_reports_configured_integrations(self, client):
        body = client.get("/api/health").json()
        assert body == {
            "status": "ok",
            "calendarConfigured": True,
            "paymentsConfigured": True,
            "notificationsConfigured": True,
        }

    def test_accepts_request_id_header(self, client):
        response = client.get("/api/health", headers={"x-request-id": "abc123"})
        assert response.status_code == 200


class TestSlotsRoute:
    def test_lists_slots(self, client):
        body = client.get("/api/scheduling/slots").json()
        assert body["status"] == "available"
        assert body["slots"][0] == {
            "start": "2026-10-19T09:00:00-07:00",
            "end": "2026-10-19T09:20:00-07:00",
            "date": "2026-10-19",
            "displayTime": "9:00 AM",
            "dayOfWeek": "MONDAY",
        }

    def test_calendar_outage_is_not_fully_booked(self, client, mock_calendar_service):
        mock_calendar_service.freebusy.return_value.query.return_value.execute.side_effect = (
            make_http_error(503)
        )
        response = client.get("/api/scheduling/slots")
        assert response.status_code == 200
        assert response.json()["status"] == "calendar_unavailable"


class TestBookRoute:
    def test_books_free_slot_and_confirms(self, client, mock_calendar_service, mailer):
        response = client.post("/api/scheduling/book", json=BOOK_BODY)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["eventId"] == "evt_123"
        assert body["end"] == "2026-10-19T09:20:00-07:00"
        assert inserted_body(mock_calendar_service)["summary"].endswith(": Jane Doe")
        mailer.send.assert_called_once()

    def test_missing_fields_are_a_validation_error(self, client, mock_calendar_service):
        response = client.post("/api/scheduling/book", json={"firstName": "Jane"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errorCode"] == "validation_failed"
        assert "client_email" in body["error"]
        assert "slot_start" in body["error"]
        mock_calendar_service.events.return_value.insert.assert_not_called()

    def test_calendar_failure_skips_email(self, client, mock_calendar_service, mailer):
        mock_calendar_service.events.return_value.insert.return_value.execute.side_effect = (
            make_http_error(500)
        )
        body = client.post("/api/scheduling/book", json=BOOK_BODY).json()

        assert body["success"] is False
        assert body["errorCode"] == "booking_failed"
        mailer.send.assert_not_called()


class TestCheckoutRoute:
    CHECKOUT_BODY = {
        "slotStart": "2026-10-19T10:00:00-07:00",
        "name": "Jane Doe",
        "email": "jane@example.com",
    }

    def test_returns_checkout_url(self, client):
        session = SimpleNamespace(id="cs_test_abc", url="https://checkout.stripe.com/c/pay/cs_test_abc")
        with patch("stripe.checkout.Session.create", return_value=session):
            response = client.post("/api/payment/create-checkout-session", json=self.CHECKOUT_BODY)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "sessionId": "cs_test_abc",
            "checkoutUrl": "https://checkout.stripe.com/c/pay/cs_test_abc",
        }

    def test_unconfigured_stripe_is_503(
        self, app_config, mock_calendar_service, friday_clock, mailer
    ):
        config = replace(app_config, payment=replace(app_config.payment, secret_key=""))
        container = build_container(config, mock_calendar_service, friday_clock, mailer)
        client = TestClient(create_app(container))

        response = client.post("/api/payment/create-checkout-session", json=self.CHECKOUT_BODY)

        assert response.status_code == 503
        assert response.json()["errorCode"] == "not_configured"

    def test_missing_slot_is_400(self, client):
        response = client.post(
            "/api/payment/create-checkout-session", json={"name": "Jane Doe", "email": "jane@example.com"}
        )
        assert response.status_code == 400

    def test_overlong_message_is_400_before_stripe(self, client):
        body = {**self.CHECKOUT_BODY, "message": "x" * 600}
        with patch("stripe.checkout.Session.create") as create:
            response = client.post("/api/payment/create-checkout-session", json=body)

        assert response.status_code == 400
        assert response.json()["errorCode"] == "validation_failed"
        assert "message" in response.json()["error"]
        create.assert_not_called()


class TestWebhookRoute:
    def test_signed_completion_books(self, client, mock_calendar_service):
        payload = checkout_completed_payload()
        response = client.post(
            "/api/payment/webhook",
            content=payload,
            headers={"stripe-signature": sign_payload(payload), "content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "received": True,
            "status": "booked",
            "eventType": "checkout.session.completed",
        }
        assert inserted_body(mock_calendar_service)["end"]["dateTime"] == "2026-10-19T11:00:00-07:00"

    def test_bad_signature_is_400(self, client, mock_calendar_service):
        payload = checkout_completed_payload()
        response = client.post(
            "/api/payment/webhook",
            content=payload,
            headers={"stripe-signature": "t=1,v1=deadbeef"},
        )

        assert response.status_code == 400
        assert response.json()["received"] is False
        mock_calendar_service.events.return_value.insert.assert_not_called()

    def test_booking_failure_still_acknowledged(self, client, mock_calendar_service):
        mock_calendar_service.events.return_value.insert.return_value.execute.side_effect = (
            make_http_error(500)
        )
        payload = checkout_completed_payload()
        response = client.post(
            "/api/payment/webhook", content=payload, headers={"stripe-signature": sign_payload(payload)}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "booking_failed"

