"""Student endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.schemas.student import LocationCreate, LocationRead, StudentCreate, StudentRead
from backend.app.services import students as student_service

router = APIRouter(prefix="/students", tags=["students"])


@router.post("/", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def create_student(student_in: StudentCreate, db: Session = Depends(get_db)):
    return student_service.create_student(
        db,
        name=student_in.name,
        grade=student_in.grade,
        school=student_in.school,
        hourly_rate=student_in.hourly_rate,
    )


@router.get("/{student_id}", response_model=StudentRead)
async def get_student(student_id: int, db: Session = Depends(get_db)):
    return student_service.get_student(db, student_id)


@router.post("/{student_id}/locations", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
async def add_location(student_id: int, location_in: LocationCreate, db: Session = Depends(get_db)):
    return student_service.add_location(db, student_id, location_in.name, location_in.transportation_fee)


@router.get("/{student_id}/locations", response_model=list[LocationRead])
async def list_locations(student_id: int, db: Session = Depends(get_db)):
    return student_service.list_locations(db, student_id)
