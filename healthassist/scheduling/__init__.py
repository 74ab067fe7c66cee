from healthassist.scheduling.availability import (
    AvailabilityCalculator,
    BusyIntervalFetcher,
    compute_available,
    overlaps,
)
from healthassist.scheduling.booking import BookingExecutor
from healthassist.scheduling.calendar_gateway import GoogleCalendarGateway
from healthassist.scheduling.service import SchedulingService
from healthassist.scheduling.slot_generator import SlotGenerator

__all__ = [
    "AvailabilityCalculator",
    "BookingExecutor",
    "BusyIntervalFetcher",
    "GoogleCalendarGateway",
    "SchedulingService",
    "SlotGenerator",
    "compute_available",
    "overlaps",
]
