"""Lesson lifecycle: planned -> done | cancelled.

Cancelling a regular lesson under a makeup-eligible policy issues a makeup
credit for the lesson's full length in the same transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.enums import LessonStatus
from backend.app.core.errors import InsufficientCreditError, InvalidTransitionError, NotFoundError, ValidationError
from backend.app.models.lesson import Lesson
from backend.app.models.makeup_credit import MakeupCredit
from backend.app.models.schedule_request import ScheduleRequest
from backend.app.services.billing import TEACHER_REASON_TAG
from backend.app.services.makeup import draw_credit_minutes, expiration_date, hours_to_minutes
from backend.app.services.pricing import duration_hours, duration_minutes, lesson_fee
from backend.app.services.students import hourly_rate_for

logger = logging.getLogger(__name__)

LESSON_TRANSITIONS = {
    LessonStatus.PLANNED: frozenset({LessonStatus.DONE, LessonStatus.CANCELLED}),
    LessonStatus.DONE: frozenset(),
    LessonStatus.CANCELLED: frozenset(),
}


@dataclass
class CancellationResult:
    lesson: Lesson
    credit: Optional[MakeupCredit] = None


def ensure_lesson_transition(current: str, target: LessonStatus) -> None:
    allowed = LESSON_TRANSITIONS[LessonStatus(current)]
    if target not in allowed:
        raise InvalidTransitionError(
            f"Lesson cannot move from {LessonStatus(current).value} to {target.value}",
            details={"from": LessonStatus(current).value, "to": target.value},
        )


def get_lesson(db: Session, lesson_id: int) -> Lesson:
    lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
    if not lesson:
        raise NotFoundError("Lesson not found", details={"lesson_id": lesson_id})
    return lesson


def list_lessons(
    db: Session,
    student_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    status: LessonStatus | None = None,
) -> list[Lesson]:
    query = db.query(Lesson)
    if student_id is not None:
        query = query.filter(Lesson.student_id == student_id)
    if start_date is not None:
        query = query.filter(Lesson.date >= start_date)
    if end_date is not None:
        query = query.filter(Lesson.date <= end_date)
    if status is not None:
        query = query.filter(Lesson.status == status.value)
    return query.order_by(Lesson.date, Lesson.start_time).all()


def complete_lesson(db: Session, lesson_id: int, memo: Optional[str] = None, homework: Optional[str] = None) -> Lesson:
    lesson = get_lesson(db, lesson_id)
    ensure_lesson_transition(lesson.status, LessonStatus.DONE)
    lesson.status = LessonStatus.DONE.value
    if memo is not None:
        lesson.memo = memo
    if homework is not None:
        lesson.homework = homework
    db.commit()
    db.refresh(lesson)
    logger.info("Lesson %s marked done", lesson.id)
    return lesson


def cancel_lesson(
    db: Session,
    lesson_id: int,
    makeup_eligible: bool,
    reason: Optional[str] = None,
    teacher_reason: bool = False,
) -> CancellationResult:
    """Cancel a planned lesson; ``makeup_eligible`` is the caller's policy decision.

    ``teacher_reason`` tags the stored reason so a cancellation of an already
    billed lesson is refunded in full on the next statement.
    """
    lesson = get_lesson(db, lesson_id)
    ensure_lesson_transition(lesson.status, LessonStatus.CANCELLED)

    credit = None
    try:
        lesson.status = LessonStatus.CANCELLED.value
        lesson.cancellation_reason = f"{TEACHER_REASON_TAG} {reason or ''}".strip() if teacher_reason else reason
        if makeup_eligible and not lesson.is_makeup:
            credit = MakeupCredit(
                student_id=lesson.student_id,
                total_minutes=hours_to_minutes(lesson.hours),
                used_minutes=0,
                expires_at=expiration_date(lesson.date),
                origin_lesson_id=lesson.id,
            )
            db.add(credit)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lesson)
    if credit is not None:
        db.refresh(credit)
        logger.info(
            "Lesson %s cancelled; issued makeup credit %s for %s minutes expiring %s",
            lesson.id,
            credit.id,
            credit.total_minutes,
            credit.expires_at,
        )
    else:
        logger.info("Lesson %s cancelled without makeup credit", lesson.id)
    return CancellationResult(lesson=lesson, credit=credit)


def funding_credit_id(db: Session, lesson: Lesson) -> Optional[int]:
    """The makeup credit whose minutes paid for ``lesson``, via its confirmed request."""
    request = (
        db.query(ScheduleRequest)
        .filter(ScheduleRequest.lesson_id == lesson.id, ScheduleRequest.makeup_credit_id.isnot(None))
        .first()
    )
    return request.makeup_credit_id if request else None


def reschedule_lesson(
    db: Session,
    lesson_id: int,
    new_date: date,
    start_time: str,
    end_time: str,
    reference_date: date,
) -> Lesson:
    """Move a planned lesson and recompute its length and fee.

    A longer makeup lesson draws the extra minutes from the credit that funded
    it, all or nothing. A shorter one keeps the minutes already drawn, since a
    credit balance never grows back.
    """
    lesson = get_lesson(db, lesson_id)
    if lesson.status != LessonStatus.PLANNED:
        raise InvalidTransitionError(
            "Only planned lessons can be rescheduled",
            details={"lesson_id": lesson.id, "status": lesson.status},
        )
    minutes = duration_minutes(start_time, end_time)
    if minutes <= 0:
        raise ValidationError("Lesson end time must be after its start time", details={"start_time": start_time, "end_time": end_time})

    extra_minutes = minutes - hours_to_minutes(lesson.hours)
    credit_id = None
    if lesson.is_makeup and extra_minutes > 0:
        credit_id = funding_credit_id(db, lesson)
        if credit_id is None:
            raise ValidationError(
                "Makeup lesson has no credit to cover a longer slot",
                details={"lesson_id": lesson.id, "extra_minutes": extra_minutes},
            )

    try:
        if credit_id is not None:
            draw_credit_minutes(db, credit_id, extra_minutes, reference_date)
        hours = duration_hours(start_time, end_time)
        lesson.date = new_date
        lesson.start_time = start_time
        lesson.end_time = end_time
        lesson.hours = hours
        lesson.amount = 0 if lesson.is_makeup else lesson_fee(hours, hourly_rate_for(lesson.student))
        db.commit()
    except InsufficientCreditError:
        db.rollback()
        logger.warning("Reschedule of makeup lesson %s refused: credit %s cannot cover %s more minutes", lesson_id, credit_id, extra_minutes)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(lesson)
    if credit_id is not None:
        logger.info("Lesson %s drew %s more minutes from makeup credit %s", lesson.id, extra_minutes, credit_id)
    logger.info("Lesson %s rescheduled to %s %s-%s", lesson.id, new_date, start_time, end_time)
    return lesson
