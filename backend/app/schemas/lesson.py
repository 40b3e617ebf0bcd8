"""Lesson schemas."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from backend.app.schemas.makeup_credit import MakeupCreditRead


class LessonRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    date: date
    start_time: str
    end_time: str
    hours: float
    amount: int
    transport_fee: int
    status: Literal["planned", "done", "cancelled"]
    is_makeup: bool
    memo: Optional[str] = None
    homework: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime


class LessonComplete(BaseModel):
    memo: Optional[str] = None
    homework: Optional[str] = None


class LessonCancel(BaseModel):
    # Whether this cancellation earns a makeup credit is decided by the caller.
    makeup_eligible: bool
    reason: Optional[str] = None
    teacher_reason: bool = False


class LessonReschedule(BaseModel):
    date: date
    start_time: str
    end_time: str


class CancellationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lesson: LessonRead
    credit: Optional[MakeupCreditRead] = None
