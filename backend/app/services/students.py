"""Student lookups and per-student location fees."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, ValidationError
from backend.app.core.settings import get_settings
from backend.app.models.student import Student
from backend.app.models.student_location import StudentLocation
from backend.app.services.pricing import transport_fee

logger = logging.getLogger(__name__)


def get_student(db: Session, student_id: int | None) -> Student:
    if student_id is None:
        raise ValidationError("A student is required", details={"field": "student_id"})
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found", details={"student_id": student_id})
    return student


def create_student(
    db: Session,
    name: str,
    grade: Optional[str] = None,
    school: Optional[str] = None,
    hourly_rate: Optional[int] = None,
) -> Student:
    if not name or not name.strip():
        raise ValidationError("Student name is required", details={"field": "name"})
    if hourly_rate is not None and hourly_rate < 0:
        raise ValidationError("Hourly rate must be non-negative", details={"hourly_rate": hourly_rate})
    student = Student(name=name.strip(), grade=grade, school=school, hourly_rate=hourly_rate)
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info("Created student %s", student.id)
    return student


def add_location(db: Session, student_id: int, name: str, transportation_fee: int) -> StudentLocation:
    get_student(db, student_id)
    if not name or not name.strip():
        raise ValidationError("Location name is required", details={"field": "name"})
    if transportation_fee < 0:
        raise ValidationError("Transportation fee must be non-negative", details={"transportation_fee": transportation_fee})
    location = (
        db.query(StudentLocation)
        .filter(StudentLocation.student_id == student_id, StudentLocation.name == name.strip())
        .first()
    )
    if location:
        location.transportation_fee = transportation_fee
    else:
        location = StudentLocation(student_id=student_id, name=name.strip(), transportation_fee=transportation_fee)
        db.add(location)
    db.commit()
    db.refresh(location)
    return location


def list_locations(db: Session, student_id: int) -> list[StudentLocation]:
    get_student(db, student_id)
    return (
        db.query(StudentLocation)
        .filter(StudentLocation.student_id == student_id)
        .order_by(StudentLocation.name)
        .all()
    )


def resolve_transport_fee(db: Session, student_id: int, location_name: Optional[str]) -> int:
    """Per-student location fee when one is registered, else the configured table."""
    if not location_name:
        return 0
    location = (
        db.query(StudentLocation)
        .filter(StudentLocation.student_id == student_id, StudentLocation.name == location_name)
        .first()
    )
    if location and location.transportation_fee is not None:
        return int(location.transportation_fee)
    return transport_fee(location_name)


def hourly_rate_for(student: Student) -> int:
    if student.hourly_rate is not None:
        return int(student.hourly_rate)
    return get_settings().hourly_rate
