"""
Payment-completion webhook processing.

Flow for each delivery:
    verify signature -> filter event type -> claim session id ->
    decode booking from metadata -> book 60 minutes -> notify

Every delivery that passes signature verification is acknowledged, even
when booking fails: Stripe redelivers unacknowledged events, and a
redelivery cannot fix a calendar-side failure. Duplicate deliveries of the
same session are detected and never book twice.
"""

from typing import Any, Optional

from healthassist.errors import NotConfigured, SignatureInvalid, ValidationFailed
from healthassist.logging_context import get_request_logger, reset_request_id, set_request_id
from healthassist.notifications.email_notifier import EmailNotifier, NotificationKind
from healthassist.payments.checkout import booking_from_metadata
from healthassist.payments.dedup import SessionDeduplicator
from healthassist.payments.stripe_gateway import StripeGateway
from healthassist.scheduling.booking import BookingExecutor
from healthassist.schemas.payment_schema import WebhookEvent, WebhookOutcome, WebhookStatus

logger = get_request_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def to_webhook_event(raw: Any) -> WebhookEvent:
    """Pick the fields the processor needs out of a verified Stripe event.

    Unexpected shapes degrade to empty values rather than raising, so a
    verified delivery is always answered.
    """
    raw = _as_dict(raw)
    obj = _as_dict(_as_dict(raw.get("data")).get("object"))
    metadata = _as_dict(obj.get("metadata"))
    session_id = obj.get("id")
    return WebhookEvent(
        id=str(raw.get("id") or ""),
        type=str(raw.get("type") or ""),
        payload_signature_valid=True,
        session_id=session_id if isinstance(session_id, str) and session_id else None,
        metadata={str(k): str(v) for k, v in metadata.items() if v is not None},
    )


class WebhookProcessor:
    """Turns verified checkout completions into exactly one paid booking."""

    def __init__(
        self,
        gateway: StripeGateway,
        executor: BookingExecutor,
        notifier: EmailNotifier,
        dedup: SessionDeduplicator,
        paid_duration_minutes: int = 60,
    ):
        self.gateway = gateway
        self.executor = executor
        self.notifier = notifier
        self.dedup = dedup
        self.paid_duration_minutes = paid_duration_minutes

    async def handle(self, payload: bytes, signature: Optional[str]) -> WebhookOutcome:
        try:
            raw = self.gateway.verify_event(payload, signature)
        except (SignatureInvalid, NotConfigured) as e:
            logger.warning("Webhook rejected: %s", e)
            return WebhookOutcome(status=WebhookStatus.REJECTED, error=str(e))

        event = to_webhook_event(raw)
        token = set_request_id(event.id or "webhook")
        try:
            return await self._process(event)
        finally:
            reset_request_id(token)

    async def _process(self, event: WebhookEvent) -> WebhookOutcome:
        outcome = WebhookOutcome(
            status=WebhookStatus.IGNORED,
            event_type=event.type,
            event_id=event.id,
            session_id=event.session_id,
        )
        if event.type != CHECKOUT_COMPLETED:
            logger.info("Ignoring webhook event type %s", event.type)
            return outcome

        if not event.session_id:
            logger.error("Checkout completion without a session id")
            return outcome.model_copy(update={"status": WebhookStatus.NO_BOOKING_DATA})

        if not self.dedup.claim(event.session_id):
            logger.info("Session %s already processed; skipping duplicate delivery", event.session_id)
            return outcome.model_copy(update={"status": WebhookStatus.DUPLICATE})

        try:
            return await self._book_claimed(event, outcome)
        except BaseException:
            # Cancellation or an unexpected error must not leave the session
            # claimed; the deterministic event id keeps a retry safe.
            self.dedup.release(event.session_id)
            logger.warning("Processing of session %s interrupted; claim released", event.session_id)
            raise

    async def _book_claimed(self, event: WebhookEvent, outcome: WebhookOutcome) -> WebhookOutcome:
        try:
            request = booking_from_metadata(event.metadata, self.paid_duration_minutes)
        except ValidationFailed as e:
            logger.error("Nothing to book for session %s: %s", event.session_id, e)
            self.dedup.complete(event.session_id)
            return outcome.model_copy(
                update={"status": WebhookStatus.NO_BOOKING_DATA, "error": str(e)}
            )

        result = await self.executor.book(
            request, self.paid_duration_minutes, idempotency_key=event.session_id, paid=True
        )

        if not result.success:
            self.dedup.release(event.session_id)
            logger.error(
                "Failed to book calendar after payment for session %s (%s): %s",
                event.session_id,
                request.client_email,
                result.error,
            )
            return outcome.model_copy(
                update={"status": WebhookStatus.BOOKING_FAILED, "error": result.error}
            )

        self.dedup.complete(event.session_id)
        if result.duplicate:
            logger.info("Session %s was booked by an earlier delivery", event.session_id)
            return outcome.model_copy(update={"status": WebhookStatus.DUPLICATE})

        await self.notifier.notify(
            NotificationKind.PAID,
            request.client_email,
            request.client_name,
            request.display_when,
            request.service,
        )
        logger.info("Paid consultation booked for: %s", request.client_email)
        return outcome.model_copy(update={"status": WebhookStatus.BOOKED})
