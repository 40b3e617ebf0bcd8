"""Makeup credit model: lesson-minutes owed to a student after a cancellation."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class MakeupCredit(Base):
    __tablename__ = "makeup_credits"
    __table_args__ = (
        CheckConstraint("used_minutes >= 0", name="ck_makeup_credit_used_non_negative"),
        CheckConstraint("used_minutes <= total_minutes", name="ck_makeup_credit_not_overdrawn"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    total_minutes = Column(Integer, nullable=False)
    used_minutes = Column(Integer, nullable=False, default=0)
    expires_at = Column(Date, nullable=False)
    origin_lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    student = relationship("Student", back_populates="makeup_credits")
    origin_lesson = relationship("Lesson", foreign_keys=[origin_lesson_id])

    @property
    def remaining_minutes(self) -> int:
        return (self.total_minutes or 0) - (self.used_minutes or 0)
