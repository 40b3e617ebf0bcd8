"""Schedule request endpoints: propose, counter-propose, reject, confirm."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.core.enums import RequestedBy, ScheduleRequestStatus
from backend.app.core.time import Clock, get_clock
from backend.app.db.session import get_db
from backend.app.schemas.schedule_request import (
    ConfirmationRead,
    ScheduleRequestCreate,
    ScheduleRequestRead,
    ScheduleRequestRepropose,
)
from backend.app.services import schedule_requests as request_service

router = APIRouter(prefix="/schedule-requests", tags=["schedule-requests"])


@router.post("/", response_model=ScheduleRequestRead, status_code=status.HTTP_201_CREATED)
async def create_schedule_request(
    request_in: ScheduleRequestCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return request_service.create_request(
        db,
        student_id=request_in.student_id,
        requested_by=RequestedBy(request_in.requested_by),
        slot_date=request_in.date,
        start_time=request_in.start_time,
        end_time=request_in.end_time,
        reference_date=clock.today(),
        location=request_in.location,
        memo=request_in.memo,
        makeup_credit_id=request_in.makeup_credit_id,
    )


@router.get("/", response_model=list[ScheduleRequestRead])
async def list_schedule_requests(
    student_id: int | None = None,
    status: ScheduleRequestStatus | None = None,
    db: Session = Depends(get_db),
):
    return request_service.list_requests(db, student_id=student_id, status=status)


@router.get("/{request_id}", response_model=ScheduleRequestRead)
async def get_schedule_request(request_id: int, db: Session = Depends(get_db)):
    return request_service.get_request(db, request_id)


@router.post("/{request_id}/repropose", response_model=ScheduleRequestRead)
async def repropose_schedule_request(
    request_id: int,
    proposal: ScheduleRequestRepropose,
    db: Session = Depends(get_db),
):
    return request_service.repropose_request(
        db,
        request_id,
        slot_date=proposal.date,
        start_time=proposal.start_time,
        end_time=proposal.end_time,
        location=proposal.location,
        memo=proposal.memo,
    )


@router.post("/{request_id}/reject", response_model=ScheduleRequestRead)
async def reject_schedule_request(request_id: int, db: Session = Depends(get_db)):
    return request_service.reject_request(db, request_id)


@router.post("/{request_id}/confirm", response_model=ConfirmationRead)
async def confirm_schedule_request(
    request_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    result = request_service.confirm_request(db, request_id, reference_date=clock.today())
    return ConfirmationRead.model_validate(result)
