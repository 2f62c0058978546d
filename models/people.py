from sqlalchemy import Column, Integer, String
from database import Base


# Identity records owned by the admin side; dues only read them
class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    roll_number = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=False)
    department = Column(String(100), nullable=True)
    section = Column(String(10), nullable=True)
    academic_year = Column(String(20), nullable=True)  # e.g. "2024-2028"


class Faculty(Base):
    __tablename__ = "faculty"

    id = Column(Integer, primary_key=True, index=True)
    faculty_id = Column(String(50), unique=True, index=True, nullable=False)  # Employee code
    name = Column(String(150), nullable=False)
    department = Column(String(100), nullable=True)
    designation = Column(String(100), nullable=True)
    email = Column(String(150), nullable=True)
