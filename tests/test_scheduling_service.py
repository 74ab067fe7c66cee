"""Tests for the free-screening booking flow."""

from unittest.mock import AsyncMock

import pytest

from healthassist.notifications.email_notifier import NotificationKind
from healthassist.scheduling.service import SchedulingService
from healthassist.schemas.booking_schema import BookingResult
from healthassist.errors import ErrorCode
from tests.conftest import make_request


def _service(book_result: BookingResult):
    executor = AsyncMock()
    executor.book.return_value = book_result
    notifier = AsyncMock()
    return SchedulingService(AsyncMock(), executor, notifier, free_duration_minutes=20), executor, notifier


class TestBookFreeSlot:
    @pytest.mark.asyncio
    async def test_notifies_after_successful_booking(self):
        service, executor, notifier = _service(BookingResult(success=True, event_id="evt_1"))
        request = make_request(display_date_time="Monday, Oct 19 at 9:00 AM")

        result = await service.book_free_slot(request)

        assert result.success
        executor.book.assert_awaited_once_with(request, 20)
        notifier.notify.assert_awaited_once_with(
            NotificationKind.FREE,
            "jane@example.com",
            "Jane Doe",
            "Monday, Oct 19 at 9:00 AM",
            None,
        )

    @pytest.mark.asyncio
    async def test_failed_booking_sends_nothing(self):
        service, _, notifier = _service(
            BookingResult.failure("Calendar rejected the booking", ErrorCode.BOOKING_FAILED)
        )

        result = await service.book_free_slot(make_request())

        assert not result.success
        notifier.notify.assert_not_awaited()
