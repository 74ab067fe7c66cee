"""Shared utilities used across the scheduling engine."""

import re
from datetime import datetime
from typing import Optional

NOT_PROVIDED = "Not provided"

DAY_NAMES = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(408) 982-6644")
        '4089826644'
        >>> normalize_phone("+1 408 982 6644")
        '+14089826644'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def or_not_provided(value: Optional[str]) -> str:
    """Render an optional contact field, never leaving it blank."""
    if value is None or not value.strip():
        return NOT_PROVIDED
    return value.strip()


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def format_display_time(moment: datetime) -> str:
    """Render a wall-clock time as ``h:mm AM``.

    Examples:
        >>> format_display_time(datetime(2026, 10, 20, 9, 0))
        '9:00 AM'
        >>> format_display_time(datetime(2026, 10, 20, 16, 40))
        '4:40 PM'
    """
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


def format_money(amount_cents: int, currency: str) -> str:
    """Render a minor-unit amount, using a $ sign for dollar currencies."""
    amount = f"{amount_cents // 100}.{amount_cents % 100:02d}"
    if currency.lower() in ("usd", "cad", "aud"):
        return f"${amount}"
    return f"{amount} {currency.upper()}"
