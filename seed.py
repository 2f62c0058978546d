import logging

from database import SessionLocal, engine, Base
from models.departments import Department
from models.people import Student, Faculty

logger = logging.getLogger(__name__)

DEPARTMENTS = ["ACADEMICS", "ACCOUNTS", "CSE", "ECE", "HOSTEL", "HR", "LIBRARY", "SPORTS"]

STUDENTS = [
    {"roll_number": "21CS001", "name": "Ananya Rao", "department": "CSE", "section": "A", "academic_year": "2021-2025"},
    {"roll_number": "21CS002", "name": "Rahul Verma", "department": "CSE", "section": "A", "academic_year": "2021-2025"},
    {"roll_number": "22EC014", "name": "Meera Iyer", "department": "ECE", "section": "B", "academic_year": "2022-2026"},
    {"roll_number": "23CS045", "name": "Karthik Reddy", "department": "CSE", "section": "B", "academic_year": "2023-2027"},
]

FACULTY = [
    {"faculty_id": "FAC-1001", "name": "Dr. S. Kumar", "department": "CSE", "designation": "Professor", "email": "skumar@campus.edu"},
    {"faculty_id": "FAC-1002", "name": "Dr. P. Nair", "department": "ECE", "designation": "Associate Professor", "email": "pnair@campus.edu"},
]


def seed_data(db):
    """Insert departments and identity records that are not there yet"""
    logger.info("Seeding master data...")

    # 1. DEPARTMENTS
    for name in DEPARTMENTS:
        exists = db.query(Department).filter_by(name=name).first()
        if not exists:
            db.add(Department(name=name))
            logger.info("Added department: %s", name)
    db.commit()

    # 2. STUDENTS
    for s in STUDENTS:
        exists = db.query(Student).filter_by(roll_number=s["roll_number"]).first()
        if not exists:
            db.add(Student(**s))
            logger.info("Added student: %s", s["roll_number"])
    db.commit()

    # 3. FACULTY
    for f in FACULTY:
        exists = db.query(Faculty).filter_by(faculty_id=f["faculty_id"]).first()
        if not exists:
            db.add(Faculty(**f))
            logger.info("Added faculty: %s", f["faculty_id"])
    db.commit()

    logger.info("All data seeded")


if __name__ == "__main__":
    from logging_config import setup_logging
    from models.dues import Due  # noqa: F401 (creates the dues table too)

    setup_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_data(db)
    finally:
        db.close()
