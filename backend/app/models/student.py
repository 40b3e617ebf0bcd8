"""Student model."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    grade = Column(String, nullable=True)
    school = Column(String, nullable=True)
    # Overrides the configured default hourly rate when set.
    hourly_rate = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    locations = relationship("StudentLocation", back_populates="student", cascade="all, delete-orphan")
    lessons = relationship("Lesson", back_populates="student", cascade="all, delete-orphan")
    makeup_credits = relationship("MakeupCredit", back_populates="student", cascade="all, delete-orphan")
    schedule_requests = relationship("ScheduleRequest", back_populates="student", cascade="all, delete-orphan")
    monthly_payments = relationship("MonthlyPayment", back_populates="student", cascade="all, delete-orphan")
    other_charges = relationship("BillingOtherCharge", back_populates="student", cascade="all, delete-orphan")
