from healthassist.schemas.booking_schema import (
    AvailabilityResult,
    AvailabilityStatus,
    BookingRequest,
    BookingResult,
    BusyInterval,
    SlotView,
    TimeSlot,
)
from healthassist.schemas.payment_schema import (
    CheckoutResult,
    PaymentSession,
    WebhookEvent,
    WebhookOutcome,
    WebhookStatus,
)

__all__ = [
    "AvailabilityResult",
    "AvailabilityStatus",
    "BookingRequest",
    "BookingResult",
    "BusyInterval",
    "SlotView",
    "TimeSlot",
    "CheckoutResult",
    "PaymentSession",
    "WebhookEvent",
    "WebhookOutcome",
    "WebhookStatus",
]
