"""
Dues Router
Create dues (single, bulk, workbook upload), move them through payment
confirmation and clearance, and list them within the caller's visibility.
"""
import io
import logging
from typing import Any, Dict, List, Optional

import pandas as pd
from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import DEFAULT_PERSON_TYPE_BY_DEPARTMENT
from database import get_db
from models.dues import Due
from models.enums import Category, DueStatus, PersonType, due_types_for
from models.people import Faculty, Student
from routers.auth import get_current_principal
from schemas.dues import BulkImportOut, DueOut, PersonDueStatusOut, PersonLedgerOut, TransitionOut
from services.authorization import (
    ALL_DEPARTMENTS, Action, Principal, authorize, has_cross_department_read,
)
from services.errors import DuesError, NotFound, ValidationError
from services.ingestion import (
    IngestionContext, RowError, RowRejected, normalize, normalize_row, resolve_person_type,
)
from services.lifecycle import save_clearance, save_payment_confirmation
from services.lookup import find_person

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dues", tags=["Dues"])

STORE_ERROR = "store-error"
INVALID_FILE = "invalid-file"
UNKNOWN_PERSON = "unknown-person"

TEMPLATE_COLUMNS = [
    "personId", "personName", "personType", "department", "description",
    "amount", "dueDate", "category", "dueType", "link",
]


# ==========================================
#   HELPERS
# ==========================================

def ingestion_context(principal: Principal) -> IngestionContext:
    """Uploads default to the operator's department; some departments imply a person type"""
    return IngestionContext(
        default_department=principal.department,
        default_person_type=DEFAULT_PERSON_TYPE_BY_DEPARTMENT.get(principal.department.strip().upper()),
    )


def get_due_or_404(db: Session, due_id: int, for_update: bool = False) -> Due:
    query = db.query(Due).filter(Due.id == due_id)
    if for_update:
        # Row lock where the store supports it; the state write is a compare-and-set anyway
        query = query.with_for_update()
    due = query.first()
    if not due:
        raise NotFound(f"Due {due_id} not found")
    return due


def import_rows(rows: List[Any], principal: Principal, db: Session) -> dict:
    """Normalize a batch and save every valid row on its own; failures never undo other rows"""
    result = normalize(rows, ingestion_context(principal))
    errors: List[RowError] = list(result.errors)
    imported = 0

    for draft in result.valid:
        try:
            db.add(Due(**draft.to_model_kwargs()))
            db.commit()
            imported += 1
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Could not save bulk row %s: %s", draft.row_index, e)
            errors.append(RowError(draft.row_index, STORE_ERROR, "Could not save this row"))

    errors.sort(key=lambda err: err.row_index)
    logger.info(
        "Bulk import by %s: %d imported, %d skipped",
        principal.department, imported, len(errors),
    )
    return {
        "imported": imported,
        "skipped": len(errors),
        "errors": [err.to_dict() for err in errors],
    }


def parse_enum_filter(value: Optional[str], allowed: List[str], field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}", field=field)
    return value


# ==========================================
#   CREATE
# ==========================================

@router.post("", response_model=DueOut, status_code=201)
def create_due(
    row: Dict[str, Any] = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Raise a single due. Status, payment status and dates are set by the server."""
    authorize(principal, Action.CREATE_DUE)

    try:
        draft = normalize_row(row, ingestion_context(principal))
    except RowRejected as e:
        raise ValidationError(e.detail, field=e.field, reason=e.reason)

    # Single entry picks a person from the directory, so the id must exist
    if find_person(db, draft.person_id) is None:
        raise ValidationError(
            f"No student or faculty member with id '{draft.person_id}'",
            field="personId", reason=UNKNOWN_PERSON,
        )

    due = Due(**draft.to_model_kwargs())
    db.add(due)
    db.commit()
    db.refresh(due)
    logger.info("Due %s raised by %s against %s", due.id, principal.department, due.person_id)
    return due


@router.post("/bulk", response_model=BulkImportOut)
def create_dues_bulk(
    rows: List[Any] = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Import many dues at once. Not transactional: good rows are saved even when
    others are rejected, and every rejection comes back with its row index.
    """
    authorize(principal, Action.BULK_CREATE)
    return import_rows(rows, principal, db)


@router.post("/bulk/upload", response_model=BulkImportOut)
async def upload_dues_workbook(
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Same as /dues/bulk, reading the rows from the first sheet of an Excel file"""
    authorize(principal, Action.BULK_CREATE)

    if not file.filename or not file.filename.lower().endswith((".xlsx", ".xls")):
        raise ValidationError(
            "Invalid file format. Please upload an Excel file (.xlsx or .xls)",
            field="file", reason=INVALID_FILE,
        )

    contents = await file.read()
    # openpyxl = .xlsx, pandas picks the engine for legacy .xls
    engine = "openpyxl" if file.filename.lower().endswith(".xlsx") else None
    try:
        df = pd.read_excel(io.BytesIO(contents), engine=engine)
    except Exception as e:
        raise ValidationError(f"Error reading Excel file: {str(e)}", field="file", reason=INVALID_FILE)

    df.columns = [str(c).strip() for c in df.columns]
    rows = df.astype(object).where(pd.notna(df), None).to_dict(orient="records")
    return import_rows(rows, principal, db)


@router.get("/bulk/template")
def download_dues_template(principal: Principal = Depends(get_current_principal)):
    """Excel template with the expected columns and one example row"""
    authorize(principal, Action.BULK_CREATE)

    context = ingestion_context(principal)
    person_type = context.default_person_type or PersonType.STUDENT.value
    sample = {
        "personId": "FAC-1001" if person_type == PersonType.FACULTY.value else "21CS001",
        "personName": "Full Name",
        "personType": person_type,
        "department": principal.department,
        "description": "Describe the due",
        "amount": 500,
        "dueDate": "2025-12-31",
        "category": Category.PAYABLE.value,
        "dueType": due_types_for(person_type)[0],
        "link": "",
    }

    buffer = io.BytesIO()
    pd.DataFrame([sample], columns=TEMPLATE_COLUMNS).to_excel(buffer, index=False, engine="openpyxl")
    buffer.seek(0)
    return StreamingResponse(
        buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="dues_template.xlsx"'},
    )


# ==========================================
#   LIST & READ
# ==========================================

@router.get("", response_model=List[DueOut])
def list_dues(
    department: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    person_type: Optional[str] = Query(None, alias="personType"),
    person_id: Optional[str] = Query(None, alias="personId"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    List dues. Without a department filter, Accounts/Academics see every
    department and everyone else sees their own.
    """
    department = department.strip() if department else None
    authorize(principal, Action.READ_DUES, department=department)

    status = parse_enum_filter(status, [s.value for s in DueStatus], "status")
    category = parse_enum_filter(category, [c.value for c in Category], "category")
    person_type = parse_enum_filter(person_type, [p.value for p in PersonType], "personType")

    query = db.query(Due)
    if department and department != ALL_DEPARTMENTS:
        query = query.filter(Due.in_department(department))
    elif department is None and not has_cross_department_read(principal):
        query = query.filter(Due.in_department(principal.department))

    if status:
        query = query.filter(Due.status == status)
    if category:
        query = query.filter(Due.category == category)
    if person_type:
        query = query.filter(Due.person_type == person_type)
    if person_id:
        query = query.filter(Due.person_id == person_id.strip())

    return query.order_by(Due.date_added.desc(), Due.id.desc()).all()


@router.get("/people", response_model=List[PersonDueStatusOut])
def list_people_with_due_status(
    person_type: str = Query(PersonType.STUDENT.value, alias="personType"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Accounts view: every student (or faculty member) with a pending-dues flag"""
    authorize(principal, Action.READ_PEOPLE)

    resolved = resolve_person_type(person_type)
    if resolved is None:
        raise ValidationError("personType must be Student or Faculty", field="personType")

    pending_ids = {
        person_id for (person_id,) in db.query(Due.person_id).filter(
            Due.person_type == resolved,
            Due.status == DueStatus.PENDING.value,
        ).distinct()
    }

    if resolved == PersonType.STUDENT.value:
        people = [(s.roll_number, s) for s in db.query(Student).order_by(Student.roll_number).all()]
    else:
        people = [(f.faculty_id, f) for f in db.query(Faculty).order_by(Faculty.name).all()]

    return [
        {
            "person_id": person_id,
            "name": person.name,
            "person_type": resolved,
            "department": person.department,
            "has_pending_dues": person_id in pending_ids,
        }
        for person_id, person in people
    ]


@router.get("/people/{person_id}", response_model=PersonLedgerOut)
def get_person_ledger(
    person_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Accounts view: every due of one person, pending and cleared"""
    authorize(principal, Action.READ_PEOPLE)

    person = find_person(db, person_id)
    if person is None:
        raise NotFound(f"No student or faculty member with id '{person_id}'")
    name, person_type = person

    dues = db.query(Due).filter(Due.person_id == person_id).order_by(Due.date_added.desc(), Due.id.desc()).all()
    return {"person_id": person_id, "name": name, "person_type": person_type, "dues": dues}


@router.get("/{due_id}", response_model=DueOut)
def get_due(
    due_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    due = get_due_or_404(db, due_id)
    authorize(principal, Action.READ_DUES, department=due.department)
    return due


# ==========================================
#   TRANSITIONS
# ==========================================

def run_transition(save, due_id: int, principal: Principal, db: Session) -> TransitionOut:
    due = get_due_or_404(db, due_id, for_update=True)
    try:
        result = save(db, principal, due)
    except DuesError:
        db.rollback()  # releases the row lock, nothing was written
        raise

    db.commit()
    # Re-read: the write went through a guarded UPDATE, not the loaded object
    due = get_due_or_404(db, due_id)
    return TransitionOut(message=result.message, changed=result.changed, due=DueOut.model_validate(due))


@router.put("/{due_id}/payment", response_model=TransitionOut)
def confirm_due_payment(
    due_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Accounts confirms the money was received. Safe to retry."""
    return run_transition(save_payment_confirmation, due_id, principal, db)


@router.put("/{due_id}/clear", response_model=TransitionOut)
def clear_due_by_department(
    due_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """The owning department clears the due. Do not retry blindly: a second clear is a 409."""
    return run_transition(save_clearance, due_id, principal, db)
