"""Checkout session and webhook data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from healthassist.errors import ErrorCode
from healthassist.schemas.booking_schema import CamelModel


class PaymentSession(BaseModel):
    """Hosted checkout carrying the booking intent in its metadata."""

    session_id: str
    checkout_url: str
    metadata: dict[str, str] = Field(default_factory=dict)
    amount_cents: int
    currency: str


class CheckoutResult(CamelModel):
    """Outcome of checkout creation; not being configured is an outcome, not an error."""

    success: bool
    session_id: Optional[str] = None
    checkout_url: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def created(cls, session: PaymentSession) -> "CheckoutResult":
        return cls(success=True, session_id=session.session_id, checkout_url=session.checkout_url)

    @property
    def not_configured(self) -> bool:
        return self.error_code == ErrorCode.NOT_CONFIGURED


class WebhookEvent(BaseModel):
    """A signature-checked payment provider event."""

    id: str = ""
    type: str
    payload_signature_valid: bool
    session_id: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class WebhookStatus(str, Enum):
    """What the processor did with a delivery."""

    REJECTED = "rejected"
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    NO_BOOKING_DATA = "no_booking_data"
    BOOKED = "booked"
    BOOKING_FAILED = "booking_failed"


class WebhookOutcome(BaseModel):
    """Result of one webhook delivery."""

    status: WebhookStatus
    event_type: Optional[str] = None
    session_id: Optional[str] = None
    event_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def acknowledged(self) -> bool:
        """Every verified delivery is acknowledged, whatever the booking outcome."""
        return self.status != WebhookStatus.REJECTED
