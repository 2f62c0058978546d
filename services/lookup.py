"""
Public Lookup Service
Read-only view of one person's pending dues, grouped by department.
"""
import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from models.departments import Department
from models.dues import Due
from models.enums import DueStatus, PersonType
from models.people import Faculty, Student
from services.authorization import normalize_department
from services.errors import NotFound

logger = logging.getLogger(__name__)


def find_person(db: Session, person_id: str):
    """Returns (name, person_type) from the identity tables, or None"""
    student = db.query(Student).filter(Student.roll_number == person_id).first()
    if student:
        return student.name, PersonType.STUDENT.value
    faculty = db.query(Faculty).filter(Faculty.faculty_id == person_id).first()
    if faculty:
        return faculty.name, PersonType.FACULTY.value
    return None


def group_by_department(department_names: Iterable[str], dues: Iterable) -> List[dict]:
    """
    One entry per known department, in the given order, even when it has no
    dues. Departments that only appear on a due are appended at the end.
    """
    groups = []
    index = {}
    for name in department_names:
        key = normalize_department(name)
        if key in index:
            continue
        index[key] = len(groups)
        groups.append({"department": name, "dues": []})

    for due in dues:
        key = normalize_department(due.department)
        if key not in index:
            index[key] = len(groups)
            groups.append({"department": due.department, "dues": []})
        groups[index[key]]["dues"].append(due)

    return groups


def dues_for(db: Session, person_id: str) -> dict:
    person_id = (person_id or "").strip()
    person = find_person(db, person_id) if person_id else None
    if person is None:
        raise NotFound(f"No student or faculty member with id '{person_id}'")
    person_name, person_type = person

    departments = [d.name for d in db.query(Department).order_by(Department.name).all()]
    pending = db.query(Due).filter(
        Due.person_id == person_id,
        Due.status == DueStatus.PENDING.value,
    ).order_by(Due.due_date, Due.id).all()

    logger.info("Public lookup for %s: %d pending dues", person_id, len(pending))
    return {
        "personId": person_id,
        "personName": person_name,
        "personType": person_type,
        "departmentDues": group_by_department(departments, pending),
    }
