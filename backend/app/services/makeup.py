"""Makeup credit ledger: expiry, urgency labels and redemption eligibility.

A credit expires one calendar month after the cancelled lesson. When the next
month is shorter than the lesson's day-of-month the expiry is clamped to that
month's last day, so a lesson on 31 January yields a credit expiring on
28 (or 29) February.

Reference values may be ``date`` or ``datetime``. Dates are taken at midnight;
timezone-aware datetimes are compared on their wall-clock value.
"""

import calendar
import math
from datetime import date, datetime
from typing import Iterable, List

from sqlalchemy import update
from sqlalchemy.orm import Session

from backend.app.core.errors import InsufficientCreditError
from backend.app.core.time import utc_now
from backend.app.models.makeup_credit import MakeupCredit
from backend.app.services.pricing import MINUTES_PER_HOUR

URGENT_DAYS = 7
SECONDS_PER_DAY = 24 * 60 * 60


def add_months(value: date, months: int) -> date:
    """Calendar-month arithmetic clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def expiration_date(original_lesson_date: date) -> date:
    return add_months(original_lesson_date, 1)


def is_expired(expires_at: date | datetime, reference_date: date | datetime) -> bool:
    return _as_datetime(expires_at) < _as_datetime(reference_date)


def days_until_expiration(expires_at: date | datetime, reference_date: date | datetime) -> int:
    """Whole days left, rounded up; negative once the credit has lapsed."""
    delta = _as_datetime(expires_at) - _as_datetime(reference_date)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def display_status(expires_at: date | datetime, reference_date: date | datetime) -> str:
    days = days_until_expiration(expires_at, reference_date)
    if days < 0:
        return "expired"
    if days == 0:
        return "expires today"
    if days == 1:
        return "expires tomorrow"
    if days <= URGENT_DAYS:
        return f"{days} days remaining"
    return f"expires on {expires_at.month}/{expires_at.day}"


def is_urgent(expires_at: date | datetime, reference_date: date | datetime) -> bool:
    return days_until_expiration(expires_at, reference_date) <= URGENT_DAYS


def is_redeemable(credit, reference_date: date | datetime) -> bool:
    """A credit can fund a request while it has minutes left and has not expired."""
    return credit.remaining_minutes > 0 and _as_datetime(credit.expires_at) > _as_datetime(reference_date)


def available_credits(credits: Iterable, reference_date: date | datetime) -> List:
    """Redeemable credits, soonest expiry first."""
    eligible = [credit for credit in credits if is_redeemable(credit, reference_date)]
    return sorted(eligible, key=lambda credit: (_as_datetime(credit.expires_at), credit.id or 0))


def total_remaining_minutes(credits: Iterable, reference_date: date | datetime) -> int:
    return sum(credit.remaining_minutes for credit in available_credits(credits, reference_date))


def minutes_to_hours(minutes: int) -> float:
    return minutes / MINUTES_PER_HOUR


def hours_to_minutes(hours: float) -> int:
    return int(math.floor(hours * MINUTES_PER_HOUR + 0.5))


def format_makeup_time(minutes: int) -> str:
    """Render minutes as ``2h``, ``1h 30m`` or ``45m``."""
    hours, remainder = divmod(minutes, MINUTES_PER_HOUR)
    if remainder == 0:
        return f"{hours}h"
    if hours == 0:
        return f"{remainder}m"
    return f"{hours}h {remainder}m"


def list_student_credits(db: Session, student_id: int, reference_date: date | datetime, include_unavailable: bool = False) -> List[MakeupCredit]:
    credits = (
        db.query(MakeupCredit)
        .filter(MakeupCredit.student_id == student_id)
        .order_by(MakeupCredit.expires_at, MakeupCredit.id)
        .all()
    )
    if include_unavailable:
        return credits
    return available_credits(credits, reference_date)


def draw_credit_minutes(db: Session, credit_id: int, minutes: int, reference_date: date) -> None:
    """Spend ``minutes`` of a credit in one conditional UPDATE, or raise.

    The row only changes while the balance still covers the draw and the
    credit has not expired, so concurrent draws cannot overspend it. The
    caller owns the transaction and rolls back on failure.
    """
    result = db.execute(
        update(MakeupCredit)
        .where(
            MakeupCredit.id == credit_id,
            MakeupCredit.used_minutes + minutes <= MakeupCredit.total_minutes,
            MakeupCredit.expires_at > reference_date,
        )
        .values(used_minutes=MakeupCredit.used_minutes + minutes, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientCreditError(
            "Makeup credit is expired or does not cover this lesson",
            details={"makeup_credit_id": credit_id, "required_minutes": minutes},
        )
