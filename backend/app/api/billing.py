"""Monthly billing endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.core.time import Clock, get_clock
from backend.app.db.session import get_db
from backend.app.schemas.billing import BillingInfoRead, OtherChargeCreate, OtherChargeRead
from backend.app.services.billing import (
    add_other_charge,
    get_student_billing_info,
    list_other_charges,
    next_month,
    parse_year_month,
)
from backend.app.services.students import get_student

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/{student_id}", response_model=BillingInfoRead)
async def get_billing(
    student_id: int,
    month: str | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Billing for ``month`` (YYYY-MM); defaults to the month after today."""
    get_student(db, student_id)
    today = clock.today()
    target_month = parse_year_month(month) if month else next_month(today)
    info = get_student_billing_info(db, student_id, target_month, today)
    return BillingInfoRead.model_validate(info)


@router.get("/{student_id}/charges", response_model=list[OtherChargeRead])
async def get_other_charges(student_id: int, month: str, db: Session = Depends(get_db)):
    get_student(db, student_id)
    return list_other_charges(db, student_id, parse_year_month(month))


@router.post("/{student_id}/charges", response_model=OtherChargeRead, status_code=status.HTTP_201_CREATED)
async def create_other_charge(student_id: int, charge_in: OtherChargeCreate, db: Session = Depends(get_db)):
    get_student(db, student_id)
    return add_other_charge(
        db,
        student_id,
        parse_year_month(charge_in.month),
        charge_in.description,
        charge_in.amount,
        charge_date=charge_in.charge_date,
    )
