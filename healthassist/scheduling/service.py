"""Free-screening booking flow: book the short slot, then confirm by email."""

import logging

from healthassist.notifications.email_notifier import EmailNotifier, NotificationKind
from healthassist.scheduling.availability import AvailabilityCalculator
from healthassist.scheduling.booking import BookingExecutor
from healthassist.schemas.booking_schema import AvailabilityResult, BookingRequest, BookingResult

logger = logging.getLogger(__name__)


class SchedulingService:
    """Entry points used by the scheduling routes."""

    def __init__(
        self,
        calculator: AvailabilityCalculator,
        executor: BookingExecutor,
        notifier: EmailNotifier,
        free_duration_minutes: int,
    ):
        self.calculator = calculator
        self.executor = executor
        self.notifier = notifier
        self.free_duration_minutes = free_duration_minutes

    async def get_available_slots(self) -> AvailabilityResult:
        return await self.calculator.get_available_slots()

    async def book_free_slot(self, request: BookingRequest) -> BookingResult:
        """Book a free screening; the email is sent only after the event exists."""
        result = await self.executor.book(request, self.free_duration_minutes)
        if result.success:
            await self.notifier.notify(
                NotificationKind.FREE,
                request.client_email,
                request.client_name,
                request.display_when,
                request.service,
            )
        else:
            logger.warning("Free booking for %s failed: %s", request.client_email, result.error)
        return result
