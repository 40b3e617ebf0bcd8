from datetime import date
from typing import Optional

from pydantic import BaseModel


class ClockOverride(BaseModel):
    date: str


class ClockRead(BaseModel):
    today: date
    override: Optional[date] = None
