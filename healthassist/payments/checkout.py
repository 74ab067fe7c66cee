"""
Paid-consultation checkout.

The booking intent travels inside the checkout session's metadata: it is the
only record of a pending paid booking between checkout creation and the
completion webhook, so it must round-trip every field the booking needs.
"""

import logging
from typing import Mapping

import stripe
from pydantic import ValidationError

from healthassist.config import PaymentConfig
from healthassist.errors import ErrorCode, NotConfigured, ValidationFailed
from healthassist.payments.stripe_gateway import StripeGateway
from healthassist.schemas.booking_schema import BookingRequest
from healthassist.schemas.payment_schema import CheckoutResult, PaymentSession

logger = logging.getLogger(__name__)

SESSION_TYPE_PAID = "paid-60"


def booking_to_metadata(request: BookingRequest) -> dict[str, str]:
    """Flatten a booking into Stripe metadata (string values; absent fields become "")."""
    return {
        "customerName": request.client_name,
        "customerEmail": request.client_email,
        "customerPhone": request.client_phone or "",
        "slotStart": request.slot_start.isoformat(),
        "displayDateTime": request.display_date_time or request.slot_start.isoformat(),
        "service": request.service or "",
        "message": request.message or "",
        "sessionType": SESSION_TYPE_PAID,
    }


def booking_from_metadata(metadata: Mapping[str, str], duration_minutes: int) -> BookingRequest:
    """Rebuild the booking intent from session metadata.

    Raises:
        ValidationFailed: required keys are missing or malformed.
    """
    if not metadata or not metadata.get("slotStart"):
        raise ValidationFailed("Session metadata carries no booking details")
    try:
        return BookingRequest(
            slot_start=metadata["slotStart"],
            duration_minutes=duration_minutes,
            client_name=metadata.get("customerName", ""),
            client_email=metadata.get("customerEmail", ""),
            client_phone=metadata.get("customerPhone"),
            service=metadata.get("service"),
            message=metadata.get("message"),
            display_date_time=metadata.get("displayDateTime"),
        )
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationFailed(f"Invalid booking metadata: {fields}") from e


class PaymentSessionInitiator:
    """Starts a hosted checkout for the fixed-price paid consultation."""

    def __init__(self, config: PaymentConfig, gateway: StripeGateway):
        self.config = config
        self.gateway = gateway

    async def create_session(self, request: BookingRequest) -> CheckoutResult:
        """Create the checkout; missing credentials are an outcome, not an exception."""
        metadata = booking_to_metadata(request)
        try:
            session = await self.gateway.create_checkout_session(request.client_email, metadata)
        except NotConfigured as e:
            logger.warning("Checkout requested but %s", e)
            return CheckoutResult(
                success=False, error="Stripe is not configured", error_code=ErrorCode.NOT_CONFIGURED
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout creation failed: %s", e)
            return CheckoutResult(
                success=False,
                error=e.user_message or str(e),
                error_code=ErrorCode.PAYMENT_FAILED,
            )

        payment = PaymentSession(
            session_id=session.id,
            checkout_url=session.url,
            metadata=metadata,
            amount_cents=self.config.price_cents,
            currency=self.config.currency,
        )
        logger.info(
            "Checkout session %s created for %s (%s)",
            payment.session_id,
            request.client_email,
            metadata["slotStart"],
        )
        return CheckoutResult.created(payment)
