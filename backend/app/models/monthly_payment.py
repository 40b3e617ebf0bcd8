from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class MonthlyPayment(Base):
    __tablename__ = "monthly_payments"
    __table_args__ = (UniqueConstraint("student_id", "year_month", name="uq_monthly_payment_student_month"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    year_month = Column(String(7), nullable=False)
    total_amount = Column(Integer, nullable=False, default=0)
    payment_reported_at = Column(DateTime, nullable=True)
    payment_confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    student = relationship("Student", back_populates="monthly_payments")
