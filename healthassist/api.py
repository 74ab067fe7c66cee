"""
HTTP surface for scheduling and payment.

Routes:
    GET  /api/health                           -> which integrations are configured
    GET  /api/scheduling/slots                 -> available slots
    POST /api/scheduling/book                  -> free 20-minute booking
    POST /api/payment/create-checkout-session  -> paid checkout
    POST /api/payment/webhook                  -> Stripe webhook (signature-verified, no auth)
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from healthassist.container import Container
from healthassist.errors import ErrorCode, ValidationFailed
from healthassist.logging_context import reset_request_id, set_request_id
from healthassist.schemas.booking_schema import BookingRequest, CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_STATUS_BY_CHECKOUT_ERROR = {
    ErrorCode.NOT_CONFIGURED: 503,
    ErrorCode.PAYMENT_FAILED: 502,
}


class ContactBody(CamelModel):
    """Client contact fields shared by the free and paid forms."""

    email: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None
    display_date_time: Optional[str] = None

    def full_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class BookSlotBody(ContactBody):
    start_time: Optional[str] = None


class CheckoutBody(ContactBody):
    slot_start: Optional[str] = None


def to_booking_request(body: ContactBody, slot_start: Optional[str]) -> BookingRequest:
    """Validate at the boundary; raises ``ValidationFailed`` naming the bad fields."""
    try:
        return BookingRequest(
            slot_start=slot_start,
            client_name=body.full_name(),
            client_email=body.email or "",
            client_phone=body.phone,
            service=body.service,
            message=body.message,
            display_date_time=body.display_date_time,
        )
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValidationFailed(f"Missing or invalid fields: {', '.join(fields)}") from e


def _validation_error(e: ValidationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": str(e), "errorCode": ErrorCode.VALIDATION_FAILED.value},
    )


def get_container(request: Request) -> Container:
    return request.app.state.container


@router.get("/health")
async def health(container: Container = Depends(get_container)) -> dict:
    return {
        "status": "ok",
        "calendarConfigured": container.calendar.configured,
        "paymentsConfigured": container.stripe.configured,
        "notificationsConfigured": container.notifier.mailer.configured,
    }


@router.get("/scheduling/slots")
async def get_available_slots(container: Container = Depends(get_container)) -> dict:
    result = await container.scheduling.get_available_slots()
    return result.to_wire()


@router.post("/scheduling/book")
async def book_slot(
    body: BookSlotBody, container: Container = Depends(get_container)
) -> JSONResponse:
    try:
        request = to_booking_request(body, body.start_time)
    except ValidationFailed as e:
        return _validation_error(e)

    result = await container.scheduling.book_free_slot(request)
    return JSONResponse(status_code=200, content=result.to_wire())


@router.post("/payment/create-checkout-session")
async def create_checkout_session(
    body: CheckoutBody, container: Container = Depends(get_container)
) -> JSONResponse:
    try:
        request = to_booking_request(body, body.slot_start)
    except ValidationFailed as e:
        return _validation_error(e)

    result = await container.checkout.create_session(request)
    status_code = 200 if result.success else _STATUS_BY_CHECKOUT_ERROR.get(result.error_code, 500)
    return JSONResponse(status_code=status_code, content=result.to_wire())


@router.post("/payment/webhook")
async def handle_webhook(
    request: Request, container: Container = Depends(get_container)
) -> JSONResponse:
    """Verify before parsing; always 200 once the signature checks out."""
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    outcome = await container.webhook.handle(payload, signature)
    if not outcome.acknowledged:
        return JSONResponse(status_code=400, content={"received": False, "error": outcome.error})
    return JSONResponse(
        status_code=200,
        content={"received": True, "status": outcome.status.value, "eventType": outcome.event_type},
    )


def create_app(container: Container) -> FastAPI:
    app = FastAPI(title=container.config.app_name)
    app.state.container = container

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        token = set_request_id(request.headers.get("x-request-id") or uuid.uuid4().hex[:12])
        try:
            return await call_next(request)
        finally:
            reset_request_id(token)

    app.include_router(router)
    return app
