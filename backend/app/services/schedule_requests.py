"""Schedule negotiation between teacher and parent.

requested -> reproposed -> rejected | confirmed, with requested allowed to go
straight to rejected or confirmed. Confirming materializes exactly one planned
lesson and, for credit-funded requests, draws the lesson's minutes from the
makeup credit. The draw is a single conditional UPDATE so two confirmations
racing for the same credit cannot both spend it.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.enums import RequestedBy, ScheduleRequestStatus
from backend.app.core.errors import (
    InsufficientCreditError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from backend.app.models.lesson import Lesson
from backend.app.models.makeup_credit import MakeupCredit
from backend.app.models.schedule_request import ScheduleRequest
from backend.app.services.makeup import draw_credit_minutes, is_redeemable
from backend.app.services.pricing import duration_hours, duration_minutes, lesson_fee
from backend.app.services.students import get_student, hourly_rate_for, resolve_transport_fee

logger = logging.getLogger(__name__)

REQUEST_TRANSITIONS = {
    ScheduleRequestStatus.REQUESTED: frozenset(
        {ScheduleRequestStatus.REPROPOSED, ScheduleRequestStatus.REJECTED, ScheduleRequestStatus.CONFIRMED}
    ),
    ScheduleRequestStatus.REPROPOSED: frozenset({ScheduleRequestStatus.REJECTED, ScheduleRequestStatus.CONFIRMED}),
    ScheduleRequestStatus.REJECTED: frozenset(),
    ScheduleRequestStatus.CONFIRMED: frozenset(),
}

IN_FLIGHT_STATUSES = (ScheduleRequestStatus.REQUESTED.value, ScheduleRequestStatus.REPROPOSED.value)


@dataclass
class ConfirmationResult:
    request: ScheduleRequest
    lesson: Lesson
    credit: Optional[MakeupCredit] = None


def ensure_request_transition(current: str, target: ScheduleRequestStatus) -> None:
    source = ScheduleRequestStatus(current)
    if target not in REQUEST_TRANSITIONS[source]:
        raise InvalidTransitionError(
            f"Schedule request cannot move from {source.value} to {target.value}",
            details={"from": source.value, "to": target.value},
        )


def _validated_minutes(start_time: str, end_time: str) -> int:
    minutes = duration_minutes(start_time, end_time)
    if minutes <= 0:
        raise ValidationError(
            "Lesson end time must be after its start time",
            details={"start_time": start_time, "end_time": end_time},
        )
    return minutes


def _ensure_slot_free(db: Session, student_id: int, slot_date: date, start_time: str, exclude_id: int | None = None) -> None:
    query = db.query(ScheduleRequest).filter(
        ScheduleRequest.student_id == student_id,
        ScheduleRequest.date == slot_date,
        ScheduleRequest.start_time == start_time,
        ScheduleRequest.status.in_(IN_FLIGHT_STATUSES),
    )
    if exclude_id is not None:
        query = query.filter(ScheduleRequest.id != exclude_id)
    if query.first():
        raise ValidationError(
            "Another request for this slot is already awaiting a reply",
            code="slot_in_flight",
            details={"date": slot_date.isoformat(), "start_time": start_time},
        )


def get_credit(db: Session, credit_id: int) -> MakeupCredit:
    credit = db.query(MakeupCredit).filter(MakeupCredit.id == credit_id).first()
    if not credit:
        raise NotFoundError("Makeup credit not found", details={"makeup_credit_id": credit_id})
    return credit


def _ensure_credit_covers(credit: MakeupCredit, student_id: int, minutes: int, reference_date: date) -> None:
    if credit.student_id != student_id:
        raise ValidationError(
            "Makeup credit belongs to another student",
            details={"makeup_credit_id": credit.id, "student_id": student_id},
        )
    if not is_redeemable(credit, reference_date) or credit.remaining_minutes < minutes:
        raise InsufficientCreditError(
            "Makeup credit is expired or does not cover this lesson",
            details={
                "makeup_credit_id": credit.id,
                "remaining_minutes": credit.remaining_minutes,
                "required_minutes": minutes,
                "expires_at": credit.expires_at.isoformat(),
            },
        )


def get_request(db: Session, request_id: int) -> ScheduleRequest:
    request = db.query(ScheduleRequest).filter(ScheduleRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Schedule request not found", details={"schedule_request_id": request_id})
    return request


def list_requests(
    db: Session,
    student_id: int | None = None,
    status: ScheduleRequestStatus | None = None,
) -> list[ScheduleRequest]:
    query = db.query(ScheduleRequest)
    if student_id is not None:
        query = query.filter(ScheduleRequest.student_id == student_id)
    if status is not None:
        query = query.filter(ScheduleRequest.status == status.value)
    return query.order_by(ScheduleRequest.date, ScheduleRequest.start_time).all()


def create_request(
    db: Session,
    *,
    student_id: int,
    requested_by: RequestedBy,
    slot_date: date,
    start_time: str,
    end_time: str,
    reference_date: date,
    location: Optional[str] = None,
    memo: Optional[str] = None,
    makeup_credit_id: Optional[int] = None,
) -> ScheduleRequest:
    get_student(db, student_id)
    minutes = _validated_minutes(start_time, end_time)
    _ensure_slot_free(db, student_id, slot_date, start_time)
    if makeup_credit_id is not None:
        _ensure_credit_covers(get_credit(db, makeup_credit_id), student_id, minutes, reference_date)

    request = ScheduleRequest(
        student_id=student_id,
        requested_by=RequestedBy(requested_by).value,
        date=slot_date,
        start_time=start_time,
        end_time=end_time,
        location=location,
        memo=memo,
        status=ScheduleRequestStatus.REQUESTED.value,
        makeup_credit_id=makeup_credit_id,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Schedule request %s created by %s for student %s", request.id, request.requested_by, student_id)
    return request


def repropose_request(
    db: Session,
    request_id: int,
    *,
    slot_date: date,
    start_time: str,
    end_time: str,
    location: Optional[str] = None,
    memo: Optional[str] = None,
) -> ScheduleRequest:
    """Teacher counter-offer: keep the first proposal and replace the live slot."""
    request = get_request(db, request_id)
    ensure_request_transition(request.status, ScheduleRequestStatus.REPROPOSED)
    _validated_minutes(start_time, end_time)
    _ensure_slot_free(db, request.student_id, slot_date, start_time, exclude_id=request.id)

    if request.original_date is None:
        request.original_date = request.date
        request.original_start_time = request.start_time
        request.original_end_time = request.end_time
    request.date = slot_date
    request.start_time = start_time
    request.end_time = end_time
    if location is not None:
        request.location = location
    if memo is not None:
        request.memo = memo
    request.status = ScheduleRequestStatus.REPROPOSED.value
    db.commit()
    db.refresh(request)
    logger.info("Schedule request %s reproposed to %s %s-%s", request.id, slot_date, start_time, end_time)
    return request


def reject_request(db: Session, request_id: int) -> ScheduleRequest:
    request = get_request(db, request_id)
    ensure_request_transition(request.status, ScheduleRequestStatus.REJECTED)
    request.status = ScheduleRequestStatus.REJECTED.value
    db.commit()
    db.refresh(request)
    logger.info("Schedule request %s rejected", request.id)
    return request


def confirm_request(db: Session, request_id: int, reference_date: date) -> ConfirmationResult:
    """Confirm a request, creating its lesson and drawing any makeup credit.

    Either every change is committed or none is: on failure the session is
    rolled back and the request keeps its previous status.
    """
    request = get_request(db, request_id)
    ensure_request_transition(request.status, ScheduleRequestStatus.CONFIRMED)
    student = get_student(db, request.student_id)
    minutes = _validated_minutes(request.start_time, request.end_time)
    hours = duration_hours(request.start_time, request.end_time)
    credit_id = request.makeup_credit_id
    credit = get_credit(db, credit_id) if credit_id is not None else None

    try:
        if credit is not None:
            draw_credit_minutes(db, credit.id, minutes, reference_date)
        lesson = Lesson(
            student_id=request.student_id,
            date=request.date,
            start_time=request.start_time,
            end_time=request.end_time,
            hours=hours,
            amount=0 if credit is not None else lesson_fee(hours, hourly_rate_for(student)),
            transport_fee=resolve_transport_fee(db, request.student_id, request.location),
            is_makeup=credit is not None,
            memo=request.memo,
        )
        db.add(lesson)
        db.flush()
        request.status = ScheduleRequestStatus.CONFIRMED.value
        request.lesson_id = lesson.id
        db.commit()
    except InsufficientCreditError:
        db.rollback()
        logger.warning("Confirmation of schedule request %s refused: credit %s unavailable", request_id, credit_id)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    db.refresh(lesson)
    if credit is not None:
        db.refresh(credit)
    logger.info("Schedule request %s confirmed as lesson %s", request.id, lesson.id)
    return ConfirmationResult(request=request, lesson=lesson, credit=credit)
