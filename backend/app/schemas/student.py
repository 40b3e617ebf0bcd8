"""Student schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StudentCreate(BaseModel):
    name: str
    grade: Optional[str] = None
    school: Optional[str] = None
    hourly_rate: Optional[int] = None


class StudentRead(StudentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime


class LocationCreate(BaseModel):
    name: str
    transportation_fee: int = 0


class LocationRead(LocationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
