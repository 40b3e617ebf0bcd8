"""Monthly payment tracking: parent reports a transfer, teacher confirms it."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.enums import PaymentStatus
from backend.app.core.errors import InvalidTransitionError
from backend.app.models.monthly_payment import MonthlyPayment
from backend.app.services.billing import format_year_month, get_student_billing_info, parse_year_month
from backend.app.services.students import get_student

logger = logging.getLogger(__name__)


def payment_status(payment: Optional[MonthlyPayment]) -> PaymentStatus:
    if payment is None:
        return PaymentStatus.UNPAID
    if payment.payment_confirmed_at:
        return PaymentStatus.CONFIRMED
    if payment.payment_reported_at:
        return PaymentStatus.REPORTED
    return PaymentStatus.UNPAID


def get_payment(db: Session, student_id: int, year_month: str) -> Optional[MonthlyPayment]:
    return (
        db.query(MonthlyPayment)
        .filter(MonthlyPayment.student_id == student_id, MonthlyPayment.year_month == year_month)
        .first()
    )


def report_payment(db: Session, student_id: int, year_month: str, now: datetime) -> MonthlyPayment:
    """Record the parent's transfer for a month whose billing is already confirmed."""
    get_student(db, student_id)
    target_month = parse_year_month(year_month)
    key = format_year_month(target_month)
    info = get_student_billing_info(db, student_id, target_month, now)
    if not info.is_confirmed:
        raise InvalidTransitionError(
            "Billing for this month is not confirmed yet",
            details={"year_month": key, "confirmation_date": info.confirmation_date.isoformat()},
        )

    payment = get_payment(db, student_id, key)
    if payment_status(payment) == PaymentStatus.CONFIRMED:
        raise InvalidTransitionError("Payment is already confirmed", details={"year_month": key})
    if payment is None:
        payment = MonthlyPayment(student_id=student_id, year_month=key)
        db.add(payment)
    payment.total_amount = info.statement_total
    payment.payment_reported_at = now
    db.commit()
    db.refresh(payment)
    logger.info("Payment for student %s month %s reported (%s)", student_id, key, info.statement_total)
    return payment


def confirm_payment(db: Session, student_id: int, year_month: str, now: datetime) -> MonthlyPayment:
    get_student(db, student_id)
    key = format_year_month(parse_year_month(year_month))
    payment = get_payment(db, student_id, key)
    current = payment_status(payment)
    if current != PaymentStatus.REPORTED:
        raise InvalidTransitionError(
            f"Payment cannot be confirmed while {current.value}",
            details={"year_month": key, "status": current.value},
        )
    payment.payment_confirmed_at = now
    db.commit()
    db.refresh(payment)
    logger.info("Payment for student %s month %s confirmed", student_id, key)
    return payment
