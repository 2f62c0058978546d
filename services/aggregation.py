"""
Dues Aggregator
Pure reduction over due records for the dashboard figures.
"""
from typing import Iterable

from models.enums import Category, DueStatus
from services.authorization import ALL_DEPARTMENTS, same_department


def empty_breakdown() -> dict:
    return {
        "payableCount": 0,
        "payableAmount": 0.0,
        "nonPayableCount": 0,
        "nonPayableAmount": 0.0,
        "totalCount": 0,
        "totalAmount": 0.0,
    }


def in_scope(due, scope: str) -> bool:
    return scope == ALL_DEPARTMENTS or same_department(due.department, scope)


def aggregate(records: Iterable, scope: str = ALL_DEPARTMENTS) -> dict:
    """
    Count and sum dues for one department (or "all").

    pendingAmount only covers dues still pending; the breakdown splits every
    in-scope due by category, so breakdown.totalCount == totalCount.
    """
    breakdown = empty_breakdown()
    pending_count = 0
    pending_amount = 0.0

    for due in records:
        if not in_scope(due, scope):
            continue
        amount = float(due.amount or 0)

        if due.category == Category.NON_PAYABLE.value:
            breakdown["nonPayableCount"] += 1
            breakdown["nonPayableAmount"] += amount
        else:
            breakdown["payableCount"] += 1
            breakdown["payableAmount"] += amount
        breakdown["totalCount"] += 1
        breakdown["totalAmount"] += amount

        if due.status == DueStatus.PENDING.value:
            pending_count += 1
            pending_amount += amount

    return {
        "scope": scope,
        "totalCount": breakdown["totalCount"],
        "pendingCount": pending_count,
        "pendingAmount": pending_amount,
        "breakdown": breakdown,
    }
