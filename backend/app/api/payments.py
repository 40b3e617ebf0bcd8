"""Monthly payment endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.time import Clock, get_clock
from backend.app.db.session import get_db
from backend.app.schemas.payment import MonthlyPaymentRead
from backend.app.services import payments as payment_service
from backend.app.services.billing import format_year_month, parse_year_month
from backend.app.services.students import get_student

router = APIRouter(prefix="/payments", tags=["payments"])


def _serialize(student_id: int, year_month: str, payment) -> MonthlyPaymentRead:
    status = payment_service.payment_status(payment).value
    if payment is None:
        return MonthlyPaymentRead(student_id=student_id, year_month=year_month, total_amount=0, status=status)
    return MonthlyPaymentRead(
        student_id=payment.student_id,
        year_month=payment.year_month,
        total_amount=payment.total_amount,
        payment_reported_at=payment.payment_reported_at,
        payment_confirmed_at=payment.payment_confirmed_at,
        status=status,
    )


@router.get("/{student_id}/{year_month}", response_model=MonthlyPaymentRead)
async def get_payment(student_id: int, year_month: str, db: Session = Depends(get_db)):
    get_student(db, student_id)
    key = format_year_month(parse_year_month(year_month))
    return _serialize(student_id, key, payment_service.get_payment(db, student_id, key))


@router.post("/{student_id}/{year_month}/report", response_model=MonthlyPaymentRead)
async def report_payment(
    student_id: int,
    year_month: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    payment = payment_service.report_payment(db, student_id, year_month, clock.now())
    return _serialize(student_id, payment.year_month, payment)


@router.post("/{student_id}/{year_month}/confirm", response_model=MonthlyPaymentRead)
async def confirm_payment(
    student_id: int,
    year_month: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    payment = payment_service.confirm_payment(db, student_id, year_month, clock.now())
    return _serialize(student_id, payment.year_month, payment)
