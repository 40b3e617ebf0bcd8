"""Schedule request schemas."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from backend.app.schemas.lesson import LessonRead
from backend.app.schemas.makeup_credit import MakeupCreditRead


class ScheduleRequestCreate(BaseModel):
    student_id: int
    requested_by: Literal["teacher", "parent"]
    date: date
    start_time: str
    end_time: str
    location: Optional[str] = None
    memo: Optional[str] = None
    makeup_credit_id: Optional[int] = None


class ScheduleRequestRepropose(BaseModel):
    date: date
    start_time: str
    end_time: str
    location: Optional[str] = None
    memo: Optional[str] = None


class ScheduleRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    requested_by: Literal["teacher", "parent"]
    date: date
    start_time: str
    end_time: str
    location: Optional[str] = None
    memo: Optional[str] = None
    status: Literal["requested", "reproposed", "rejected", "confirmed"]
    makeup_credit_id: Optional[int] = None
    original_date: Optional[date] = None
    original_start_time: Optional[str] = None
    original_end_time: Optional[str] = None
    lesson_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ConfirmationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request: ScheduleRequestRead
    lesson: LessonRead
    credit: Optional[MakeupCreditRead] = None
