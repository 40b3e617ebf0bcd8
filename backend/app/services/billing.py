"""Monthly billing: totals for a target month and the confirmation cutoff.

Billing for month M is locked on the 20th of month M-1. Only planned,
non-makeup lessons are charged; callers pass the lessons already narrowed to
the target month (see ``billing_month_range``).

``total_amount`` is always the lesson fees plus transport fees of ``lessons``.
The statement the parent actually pays builds on it:

* lessons created after the cutoff were not on the locked bill, so they are
  deferred and charged with the following month as "added" adjustments;
* cancellations of lessons from the previous month that were already billed
  are refunded (lesson and transport fee when the teacher cancelled, the
  transport fee alone otherwise);
* other charges for the month are added as separate line items.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from backend.app.core.enums import LessonStatus
from backend.app.core.errors import ValidationError
from backend.app.models.billing_other_charge import BillingOtherCharge
from backend.app.models.lesson import Lesson
from backend.app.services.makeup import add_months

logger = logging.getLogger(__name__)

BILLING_CONFIRMATION_DAY = 20
PAYMENT_DUE_DAY = 25

# Prefix on Lesson.cancellation_reason marking a cancellation on the teacher's side.
TEACHER_REASON_TAG = "[Teacher Reason]"

ADDED_LESSON = "added"
REFUND = "refund"


@dataclass
class AdjustmentDetail:
    date: date
    type: str
    reason: str
    amount: int
    lesson_id: Optional[int] = None


@dataclass
class BillingAdjustments:
    added_lessons_fee: int = 0
    cancellation_refund: int = 0
    details: List[AdjustmentDetail] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.added_lessons_fee - self.cancellation_refund


@dataclass
class OtherCharges:
    items: List = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(item.amount for item in self.items)


@dataclass
class BillingInfo:
    target_month: date
    total_amount: int
    lesson_fee_total: int
    transport_fee_total: int
    lesson_count: int
    is_confirmed: bool
    confirmation_date: date
    payment_due_date: date
    lessons: List = field(default_factory=list)
    deferred_lessons: List = field(default_factory=list)
    adjustments: BillingAdjustments = field(default_factory=BillingAdjustments)
    other_charges: OtherCharges = field(default_factory=OtherCharges)

    @property
    def deferred_total(self) -> int:
        return sum(lesson_charge(lesson) for lesson in self.deferred_lessons)

    @property
    def statement_total(self) -> int:
        return self.total_amount - self.deferred_total + self.adjustments.total + self.other_charges.total


def month_start(value: date | datetime) -> date:
    return date(value.year, value.month, 1)


def parse_year_month(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""
    try:
        year_text, month_text = value.split("-")
        return date(int(year_text), int(month_text), 1)
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid month '{value}', expected YYYY-MM", details={"value": value})


def format_year_month(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def billing_month_range(target_month: date) -> Tuple[date, date]:
    first = month_start(target_month)
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def confirmation_date(target_month: date) -> date:
    """The 20th of the month before ``target_month``."""
    confirmation_month = add_months(month_start(target_month), -1)
    return confirmation_month.replace(day=BILLING_CONFIRMATION_DAY)


def payment_due_date(target_month: date) -> date:
    return month_start(target_month).replace(day=PAYMENT_DUE_DAY)


def is_billing_confirmed(target_month: date, reference_date: date | datetime) -> bool:
    confirmation_month_start = add_months(month_start(target_month), -1)
    reference_month_start = month_start(reference_date)
    if reference_month_start > confirmation_month_start:
        return True
    return reference_month_start == confirmation_month_start and reference_date.day >= BILLING_CONFIRMATION_DAY


def is_billable(lesson) -> bool:
    return lesson.status == LessonStatus.PLANNED and not lesson.is_makeup


def lesson_charge(lesson) -> int:
    return (lesson.amount or 0) + (lesson.transport_fee or 0)


def created_after_cutoff(lesson) -> bool:
    """Whether the lesson was created after its own month's bill was locked.

    The cutoff is midnight starting the 20th of the previous month. Lessons
    without a creation time count as created in time.
    """
    created_at = getattr(lesson, "created_at", None)
    if created_at is None:
        return False
    cutoff = confirmation_date(lesson.date)
    return created_at.replace(tzinfo=None) > datetime(cutoff.year, cutoff.month, cutoff.day)


def is_teacher_cancellation(lesson) -> bool:
    return TEACHER_REASON_TAG in (lesson.cancellation_reason or "")


def billing_adjustments(prev_month_lessons: Iterable) -> BillingAdjustments:
    """Corrections to carry from the previous month's lessons into this bill."""
    adjustments = BillingAdjustments()
    for lesson in prev_month_lessons:
        if lesson.is_makeup:
            continue
        late = created_after_cutoff(lesson)
        if lesson.status != LessonStatus.CANCELLED:
            if late:
                amount = lesson_charge(lesson)
                adjustments.added_lessons_fee += amount
                adjustments.details.append(AdjustmentDetail(lesson.date, ADDED_LESSON, "Added lesson", amount, lesson.id))
            continue
        if late:
            # never billed, nothing to refund
            continue
        if is_teacher_cancellation(lesson):
            amount = lesson_charge(lesson)
            reason = "Cancellation refund (teacher)"
        else:
            amount = lesson.transport_fee or 0
            reason = "Cancellation refund (transport fee only)"
        if amount > 0:
            adjustments.cancellation_refund += amount
            adjustments.details.append(AdjustmentDetail(lesson.date, REFUND, reason, amount, lesson.id))
    adjustments.details.sort(key=lambda detail: detail.date)
    return adjustments


def calculate_billing_info(
    lessons: Iterable,
    target_month: date,
    reference_date: date | datetime,
    prev_month_lessons: Iterable = (),
    other_charges: Iterable = (),
) -> BillingInfo:
    target = month_start(target_month)
    billable = [lesson for lesson in lessons if is_billable(lesson)]
    lesson_fee_total = sum(lesson.amount or 0 for lesson in billable)
    transport_fee_total = sum(lesson.transport_fee or 0 for lesson in billable)
    return BillingInfo(
        target_month=target,
        total_amount=lesson_fee_total + transport_fee_total,
        lesson_fee_total=lesson_fee_total,
        transport_fee_total=transport_fee_total,
        lesson_count=len(billable),
        is_confirmed=is_billing_confirmed(target, reference_date),
        confirmation_date=confirmation_date(target),
        payment_due_date=payment_due_date(target),
        lessons=billable,
        deferred_lessons=[lesson for lesson in billable if created_after_cutoff(lesson)],
        adjustments=billing_adjustments(prev_month_lessons),
        other_charges=OtherCharges(items=list(other_charges)),
    )


def next_month(reference_date: date | datetime) -> date:
    return add_months(month_start(reference_date), 1)


def next_month_billing_info(lessons: Iterable, reference_date: date | datetime) -> BillingInfo:
    return calculate_billing_info(lessons, next_month(reference_date), reference_date)


def get_lessons_for_month(db: Session, student_id: int, target_month: date) -> List[Lesson]:
    first, last = billing_month_range(target_month)
    return (
        db.query(Lesson)
        .filter(Lesson.student_id == student_id, Lesson.date >= first, Lesson.date <= last)
        .order_by(Lesson.date, Lesson.start_time)
        .all()
    )


def list_other_charges(db: Session, student_id: int, target_month: date) -> List[BillingOtherCharge]:
    return (
        db.query(BillingOtherCharge)
        .filter(
            BillingOtherCharge.student_id == student_id,
            BillingOtherCharge.year_month == format_year_month(month_start(target_month)),
        )
        .order_by(BillingOtherCharge.id)
        .all()
    )


def add_other_charge(
    db: Session,
    student_id: int,
    target_month: date,
    description: str,
    amount: int,
    charge_date: Optional[date] = None,
) -> BillingOtherCharge:
    if not description or not description.strip():
        raise ValidationError("Charge description is required", details={"description": description})
    charge = BillingOtherCharge(
        student_id=student_id,
        year_month=format_year_month(month_start(target_month)),
        description=description.strip(),
        amount=amount,
        charge_date=charge_date,
    )
    db.add(charge)
    db.commit()
    db.refresh(charge)
    logger.info("Other charge %s of %s added for student %s month %s", charge.id, charge.amount, student_id, charge.year_month)
    return charge


def get_student_billing_info(db: Session, student_id: int, target_month: date, reference_date: date | datetime) -> BillingInfo:
    lessons = get_lessons_for_month(db, student_id, target_month)
    prev_month_lessons = get_lessons_for_month(db, student_id, add_months(month_start(target_month), -1))
    charges = list_other_charges(db, student_id, target_month)
    return calculate_billing_info(lessons, target_month, reference_date, prev_month_lessons, charges)
