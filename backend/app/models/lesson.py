"""Lesson model: one scheduled or completed tutoring session."""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.enums import LessonStatus
from backend.app.core.time import utc_now


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
    hours = Column(Float, nullable=False)
    amount = Column(Integer, nullable=False, default=0)
    transport_fee = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=LessonStatus.PLANNED.value)
    is_makeup = Column(Boolean, nullable=False, default=False)
    memo = Column(Text, nullable=True)
    homework = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    student = relationship("Student", back_populates="lessons")
