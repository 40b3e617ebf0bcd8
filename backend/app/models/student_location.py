from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class StudentLocation(Base):
    __tablename__ = "student_locations"
    __table_args__ = (UniqueConstraint("student_id", "name", name="uq_student_location_name"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    transportation_fee = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    student = relationship("Student", back_populates="locations")
