"""Lesson pricing: fees, transport costs and durations.

Amounts are whole yen. Rounding happens only in ``lesson_fee``; every other
amount is a plain integer sum.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Optional

from backend.app.core.errors import ValidationError
from backend.app.core.settings import get_settings

MINUTES_PER_HOUR = 60


def lesson_fee(hours: float, hourly_rate: int | None = None) -> int:
    """Return ``round(hours * hourly_rate)`` with halves rounded up."""
    if hours is None or hours < 0:
        raise ValidationError("Lesson hours must be non-negative", details={"hours": hours})
    rate = get_settings().hourly_rate if hourly_rate is None else hourly_rate
    fee = Decimal(str(hours)) * Decimal(str(rate))
    return int(fee.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def transport_fee(location_name: Optional[str], fees: Optional[Mapping[str, int]] = None) -> int:
    """Look up the fixed fee for a location; unknown or missing locations cost 0."""
    if not location_name:
        return 0
    table = get_settings().transport_fees if fees is None else fees
    return int(table.get(location_name, 0))


def parse_time_of_day(value: str) -> int:
    """Convert ``HH:MM`` (or ``HH:MM:SS``) to minutes after midnight."""
    parts = value.split(":") if isinstance(value, str) else []
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM", details={"value": value})
    hour, minute = int(parts[0]), int(parts[1])
    if hour > 23 or minute > 59:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM", details={"value": value})
    return hour * MINUTES_PER_HOUR + minute


def duration_minutes(start_time: str, end_time: str) -> int:
    return parse_time_of_day(end_time) - parse_time_of_day(start_time)


def duration_hours(start_time: str, end_time: str) -> float:
    """Hours between two wall-clock times; negative when end precedes start."""
    return duration_minutes(start_time, end_time) / MINUTES_PER_HOUR


def lesson_total(hours: float, transport: int, hourly_rate: int | None = None) -> int:
    return lesson_fee(hours, hourly_rate) + transport


def format_currency(amount: int) -> str:
    """Format a whole-yen amount, e.g. ``3500`` -> ``¥3,500``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}¥{abs(int(amount)):,}"
