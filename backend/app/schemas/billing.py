"""Billing schemas."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.schemas.lesson import LessonRead


class AdjustmentDetailRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    type: Literal["added", "refund"]
    reason: str
    amount: int
    lesson_id: Optional[int] = None


class BillingAdjustmentsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    added_lessons_fee: int
    cancellation_refund: int
    total: int
    details: list[AdjustmentDetailRead]


class OtherChargeCreate(BaseModel):
    month: str
    description: str = Field(min_length=1)
    amount: int
    charge_date: Optional[date] = None


class OtherChargeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    year_month: str
    description: str
    amount: int
    charge_date: Optional[date] = None
    created_at: datetime


class OtherChargesRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[OtherChargeRead]
    total: int


class BillingInfoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    target_month: date
    total_amount: int
    lesson_fee_total: int
    transport_fee_total: int
    lesson_count: int
    is_confirmed: bool
    confirmation_date: date
    payment_due_date: date
    lessons: list[LessonRead]
    deferred_lessons: list[LessonRead]
    deferred_total: int
    adjustments: BillingAdjustmentsRead
    other_charges: OtherChargesRead
    statement_total: int
