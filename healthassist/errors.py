"""Error taxonomy shared by the scheduling and payment components.

Public operations return result values carrying an ``ErrorCode``; the
exception classes are used internally between a collaborator and the
component that converts its failure into a result.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable failure reasons carried on result values."""

    NOT_CONFIGURED = "not_configured"
    CALENDAR_UNAVAILABLE = "calendar_unavailable"
    SIGNATURE_INVALID = "signature_invalid"
    VALIDATION_FAILED = "validation_failed"
    BOOKING_FAILED = "booking_failed"
    SLOT_NO_LONGER_AVAILABLE = "slot_no_longer_available"
    PAYMENT_FAILED = "payment_failed"


class SchedulingError(Exception):
    """Base class for all engine errors."""

    code: ErrorCode = ErrorCode.BOOKING_FAILED


class CalendarUnavailable(SchedulingError):
    """The external calendar could not be reached or reported an error."""

    code = ErrorCode.CALENDAR_UNAVAILABLE


class NotConfigured(CalendarUnavailable):
    """A required credential or identity is absent."""

    code = ErrorCode.NOT_CONFIGURED


class SignatureInvalid(SchedulingError):
    """A webhook payload failed signature verification."""

    code = ErrorCode.SIGNATURE_INVALID


class ValidationFailed(SchedulingError):
    """Required booking fields are missing or malformed."""

    code = ErrorCode.VALIDATION_FAILED


class BookingFailed(SchedulingError):
    """The calendar rejected the event creation."""

    code = ErrorCode.BOOKING_FAILED


class SlotNoLongerAvailable(BookingFailed):
    """A freshness re-check found the slot taken since availability was read."""

    code = ErrorCode.SLOT_NO_LONGER_AVAILABLE
