from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class MonthlyPaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    year_month: str
    total_amount: int
    payment_reported_at: Optional[datetime] = None
    payment_confirmed_at: Optional[datetime] = None
    status: Literal["unpaid", "reported", "confirmed"]
