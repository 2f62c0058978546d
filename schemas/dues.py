from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import date
from typing import List, Optional


# Every schema speaks camelCase on the wire (personId, dueDate, ...)
class CamelModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


# 1. A due as returned by every endpoint
class DueOut(CamelModel):
    id: int
    person_id: str
    person_name: str
    person_type: str
    department: str
    description: str
    amount: float
    due_date: date
    category: str
    due_type: str
    link: Optional[str] = ""
    status: str
    payment_status: str
    clear_date: Optional[date] = None
    date_added: date


# 2. Result of a payment confirmation or clearance
class TransitionOut(CamelModel):
    message: str
    changed: bool
    due: DueOut


# 3. Bulk import summary
class RowErrorOut(CamelModel):
    row_index: int
    reason: str
    detail: str = ""


class BulkImportOut(CamelModel):
    imported: int
    skipped: int
    errors: List[RowErrorOut]


# 4. Dashboard figures
class BreakdownOut(CamelModel):
    payable_count: int
    payable_amount: float
    non_payable_count: int
    non_payable_amount: float
    total_count: int
    total_amount: float


class StatsOut(CamelModel):
    scope: str
    total_count: int
    pending_count: int
    pending_amount: float
    breakdown: BreakdownOut
    total_students: int
    dept_count: int
    external_count: Optional[int] = None


# 5. Accounts view of people
class PersonDueStatusOut(CamelModel):
    person_id: str
    name: str
    person_type: str
    department: Optional[str] = None
    has_pending_dues: bool


class PersonLedgerOut(CamelModel):
    person_id: str
    name: str
    person_type: str
    dues: List[DueOut]


# 6. Public lookup
class DepartmentDuesOut(CamelModel):
    department: str
    dues: List[DueOut]


class PublicDuesOut(CamelModel):
    person_id: str
    person_name: str
    person_type: str
    department_dues: List[DepartmentDuesOut]


# 7. Directory entry (picking who a due is raised against)
class PersonOut(CamelModel):
    person_id: str
    name: str
    person_type: str
    department: Optional[str] = None
