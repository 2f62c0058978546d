"""
People Directory
All students and faculty, not department-filtered. Operators use it to pick
the person a due is raised against.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.enums import PersonType
from models.people import Faculty, Student
from routers.auth import get_current_principal
from schemas.dues import PersonOut
from services.authorization import Action, Principal, authorize

router = APIRouter(prefix="/people", tags=["People"])


@router.get("/students", response_model=List[PersonOut])
def list_students(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    authorize(principal, Action.READ_DIRECTORY)
    return [
        {
            "person_id": s.roll_number,
            "name": s.name,
            "person_type": PersonType.STUDENT.value,
            "department": s.department,
        }
        for s in db.query(Student).order_by(Student.roll_number).all()
    ]


@router.get("/faculty", response_model=List[PersonOut])
def list_faculty(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    authorize(principal, Action.READ_DIRECTORY)
    return [
        {
            "person_id": f.faculty_id,
            "name": f.name,
            "person_type": PersonType.FACULTY.value,
            "department": f.department,
        }
        for f in db.query(Faculty).order_by(Faculty.name).all()
    ]
