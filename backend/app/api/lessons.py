"""Lesson endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.enums import LessonStatus
from backend.app.core.time import Clock, get_clock
from backend.app.db.session import get_db
from backend.app.schemas.lesson import CancellationRead, LessonCancel, LessonComplete, LessonRead, LessonReschedule
from backend.app.services import lessons as lesson_service
from backend.app.services.billing import billing_month_range, parse_year_month

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.get("/", response_model=list[LessonRead])
async def list_lessons(
    student_id: int | None = None,
    month: str | None = None,
    status: LessonStatus | None = None,
    db: Session = Depends(get_db),
):
    start_date = end_date = None
    if month:
        start_date, end_date = billing_month_range(parse_year_month(month))
    return lesson_service.list_lessons(db, student_id=student_id, start_date=start_date, end_date=end_date, status=status)


@router.get("/{lesson_id}", response_model=LessonRead)
async def get_lesson(lesson_id: int, db: Session = Depends(get_db)):
    return lesson_service.get_lesson(db, lesson_id)


@router.post("/{lesson_id}/complete", response_model=LessonRead)
async def complete_lesson(lesson_id: int, payload: LessonComplete, db: Session = Depends(get_db)):
    return lesson_service.complete_lesson(db, lesson_id, memo=payload.memo, homework=payload.homework)


@router.post("/{lesson_id}/cancel", response_model=CancellationRead)
async def cancel_lesson(lesson_id: int, payload: LessonCancel, db: Session = Depends(get_db)):
    result = lesson_service.cancel_lesson(
        db,
        lesson_id,
        makeup_eligible=payload.makeup_eligible,
        reason=payload.reason,
        teacher_reason=payload.teacher_reason,
    )
    return CancellationRead.model_validate(result)


@router.post("/{lesson_id}/reschedule", response_model=LessonRead)
async def reschedule_lesson(
    lesson_id: int,
    payload: LessonReschedule,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return lesson_service.reschedule_lesson(db, lesson_id, payload.date, payload.start_time, payload.end_time, clock.today())
