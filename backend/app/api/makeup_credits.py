"""Makeup credit listing with expiry labels for the requesting role."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.time import Clock, get_clock
from backend.app.db.session import get_db
from backend.app.schemas.makeup_credit import MakeupCreditRead, MakeupCreditStatus, MakeupCreditSummary
from backend.app.services import makeup
from backend.app.services.students import get_student

router = APIRouter(prefix="/makeup-credits", tags=["makeup-credits"])


def _with_status(credit, reference_date) -> MakeupCreditStatus:
    data = MakeupCreditRead.model_validate(credit).model_dump()
    data["days_until_expiration"] = makeup.days_until_expiration(credit.expires_at, reference_date)
    data["display_status"] = makeup.display_status(credit.expires_at, reference_date)
    data["is_urgent"] = makeup.is_urgent(credit.expires_at, reference_date)
    data["remaining_display"] = makeup.format_makeup_time(credit.remaining_minutes)
    return MakeupCreditStatus(**data)


@router.get("/", response_model=MakeupCreditSummary)
async def list_makeup_credits(
    student_id: int,
    include_unavailable: bool = False,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    get_student(db, student_id)
    today = clock.today()
    credits = makeup.list_student_credits(db, student_id, today, include_unavailable=include_unavailable)
    return MakeupCreditSummary(
        student_id=student_id,
        as_of=today,
        total_remaining_minutes=makeup.total_remaining_minutes(credits, today),
        credits=[_with_status(credit, today) for credit in credits],
    )
