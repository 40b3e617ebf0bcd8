"""Schedule request model: a proposed lesson slot awaiting agreement."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.enums import ScheduleRequestStatus
from backend.app.core.time import utc_now


class ScheduleRequest(Base):
    __tablename__ = "schedule_requests"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    requested_by = Column(String(20), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
    location = Column(String, nullable=True)
    memo = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ScheduleRequestStatus.REQUESTED.value)
    makeup_credit_id = Column(Integer, ForeignKey("makeup_credits.id"), nullable=True)
    # Slot as first proposed, kept when the teacher counter-proposes.
    original_date = Column(Date, nullable=True)
    original_start_time = Column(String(8), nullable=True)
    original_end_time = Column(String(8), nullable=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    student = relationship("Student", back_populates="schedule_requests")
    makeup_credit = relationship("MakeupCredit", foreign_keys=[makeup_credit_id])
    lesson = relationship("Lesson", foreign_keys=[lesson_id])
