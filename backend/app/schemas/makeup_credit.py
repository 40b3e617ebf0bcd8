from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MakeupCreditRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    total_minutes: int
    used_minutes: int
    remaining_minutes: int
    expires_at: date
    origin_lesson_id: Optional[int] = None
    created_at: datetime


class MakeupCreditStatus(MakeupCreditRead):
    days_until_expiration: int
    display_status: str
    is_urgent: bool
    remaining_display: str


class MakeupCreditSummary(BaseModel):
    student_id: int
    as_of: date
    total_remaining_minutes: int
    credits: list[MakeupCreditStatus]
