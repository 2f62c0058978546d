"""
Closed vocabularies for dues.
Every enum is a str subclass so values compare equal to the tags stored in the database.
"""
from enum import Enum


class PersonType(str, Enum):
    STUDENT = "Student"
    FACULTY = "Faculty"


class Category(str, Enum):
    PAYABLE = "payable"          # money must be received before clearance
    NON_PAYABLE = "non-payable"


class DueStatus(str, Enum):
    PENDING = "pending"
    CLEARED = "cleared"


class PaymentStatus(str, Enum):
    DUE = "due"
    DONE = "done"


# Reason codes raised against students
class StudentDueType(str, Enum):
    DAMAGE_TO_PROPERTY = "damage-to-property"
    FEE_DELAY = "fee-delay"
    SCHOLARSHIP_ISSUE = "scholarship-issue"
    LIBRARY_FINE = "library-fine"
    HOSTEL_DUES = "hostel-dues"
    LAB_EQUIPMENT = "lab-equipment"
    SPORTS_EQUIPMENT = "sports-equipment"
    EXAM_MALPRACTICE = "exam-malpractice"
    OTHER = "other"


# Reason codes raised against faculty
class FacultyDueType(str, Enum):
    DAMAGE_TO_PROPERTY = "damage-to-property"
    EQUIPMENT_LOSS = "equipment-loss"
    SALARY_DEDUCTION = "salary-deduction"
    LIBRARY_FINE = "library-fine"
    LAB_EQUIPMENT = "lab-equipment"
    RESEARCH_COST = "research-cost"
    OTHER = "other"


DUE_TYPES_BY_PERSON_TYPE = {
    PersonType.STUDENT: StudentDueType,
    PersonType.FACULTY: FacultyDueType,
}


def due_types_for(person_type) -> list:
    """Allowed dueType tags for a person type (empty list if the type is unknown)"""
    try:
        vocabulary = DUE_TYPES_BY_PERSON_TYPE[PersonType(person_type)]
    except ValueError:
        return []
    return [member.value for member in vocabulary]


def is_valid_due_type(person_type, due_type) -> bool:
    return due_type in due_types_for(person_type)
