"""Booking and availability data models."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from healthassist.errors import ErrorCode
from healthassist.utils import blank_to_none, normalize_phone

# Stripe caps each metadata value at 500 characters; every text field travels there.
MAX_TEXT_LENGTH = 500


class CamelModel(BaseModel):
    """Base for models exchanged with the web client in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class TimeSlot:
    """A fixed-duration candidate appointment window."""

    start: datetime
    end: datetime
    duration_minutes: int

    def __post_init__(self) -> None:
        if self.end - self.start != timedelta(minutes=self.duration_minutes):
            raise ValueError(
                f"Slot end {self.end.isoformat()} is not {self.duration_minutes} minutes "
                f"after start {self.start.isoformat()}"
            )

    @classmethod
    def starting_at(cls, start: datetime, duration_minutes: int) -> "TimeSlot":
        return cls(start, start + timedelta(minutes=duration_minutes), duration_minutes)


@dataclass(frozen=True)
class BusyInterval:
    """Half-open ``[start, end)`` range reported busy by the calendar."""

    start: datetime
    end: datetime


class BookingRequest(BaseModel):
    """Validated booking intent, consumed once by the booking executor."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    slot_start: AwareDatetime
    duration_minutes: int = Field(default=20, gt=0)
    client_name: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    client_email: str = Field(min_length=3, max_length=MAX_TEXT_LENGTH)
    client_phone: Optional[str] = Field(default=None, max_length=MAX_TEXT_LENGTH)
    service: Optional[str] = Field(default=None, max_length=MAX_TEXT_LENGTH)
    message: Optional[str] = Field(default=None, max_length=MAX_TEXT_LENGTH)
    display_date_time: Optional[str] = Field(default=None, max_length=MAX_TEXT_LENGTH)

    @field_validator("client_phone", "service", "message", "display_date_time", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return blank_to_none(value) if isinstance(value, str) else value

    @field_validator("client_phone")
    @classmethod
    def _normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return normalize_phone(value) or None

    @field_validator("client_email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("client_email must be an email address")
        return value

    @property
    def display_when(self) -> str:
        """Human-readable slot time, falling back to the ISO start."""
        return self.display_date_time or self.slot_start.isoformat()


class BookingResult(CamelModel):
    """Outcome of a booking attempt; ``success=False`` always carries ``error``."""

    success: bool
    event_id: Optional[str] = None
    confirmation_url: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    duplicate: bool = False

    @classmethod
    def failure(cls, error: str, code: ErrorCode) -> "BookingResult":
        return cls(success=False, error=error, error_code=code)


class AvailabilityStatus(str, Enum):
    """Why the slot list looks the way it does."""

    AVAILABLE = "available"
    FULLY_BOOKED = "fully_booked"
    CALENDAR_UNAVAILABLE = "calendar_unavailable"
    NOT_CONFIGURED = "not_configured"


class SlotView(CamelModel):
    """Single available time slot as shown to the client."""

    start: str
    end: str
    date: str
    display_time: str
    day_of_week: str


class AvailabilityResult(CamelModel):
    """Calendar availability check result."""

    status: AvailabilityStatus
    slots: list[SlotView] = Field(default_factory=list)
    message: str = ""

    @property
    def available(self) -> bool:
        return self.status == AvailabilityStatus.AVAILABLE
