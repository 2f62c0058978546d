from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import not_
from sqlalchemy.orm import Session

from database import get_db
from models.dues import Due
from models.people import Student
from routers.auth import get_current_principal
from schemas.dues import StatsOut
from services.aggregation import aggregate
from services.authorization import (
    ALL_DEPARTMENTS, Action, Principal, authorize, has_cross_department_read,
)

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=StatsOut)
def dues_stats(
    department: Optional[str] = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    cross_reader = has_cross_department_read(principal)

    # Default scope: everything for Accounts/Academics, own department otherwise
    scope = department.strip() if department and department.strip() else None
    if scope is None:
        scope = ALL_DEPARTMENTS if cross_reader else principal.department
    authorize(principal, Action.READ_STATS, department=scope)

    query = db.query(Due)
    if scope != ALL_DEPARTMENTS:
        query = query.filter(Due.in_department(scope))
    stats = aggregate(query.all(), scope=scope)

    # Dashboard counters
    stats["totalStudents"] = db.query(Student).count()
    stats["deptCount"] = db.query(Due).filter(Due.in_department(principal.department)).count()
    stats["externalCount"] = (
        db.query(Due).filter(not_(Due.in_department(principal.department))).count()
        if cross_reader else None
    )
    return StatsOut.model_validate(stats)
