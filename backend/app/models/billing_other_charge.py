"""Extra line items billed alongside a month's lessons (materials, exam fees)."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class BillingOtherCharge(Base):
    __tablename__ = "billing_other_charges"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    year_month = Column(String(7), nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Integer, nullable=False)
    charge_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    student = relationship("Student", back_populates="other_charges")
