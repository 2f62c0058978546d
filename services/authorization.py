"""
Authorization Gate
Single decision point for who may do what to which due.

Payment confirmation and clearance are always held by different departments:
Accounts confirms money, the owning department clears. A payable due can
therefore never be cleared by the department that raised it alone.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config import ACCOUNTS_DEPARTMENT, ACADEMICS_DEPARTMENT
from services.errors import AuthorizationError

logger = logging.getLogger(__name__)

DEPARTMENT_OPERATOR = "department_operator"
SUPER_ADMIN = "super_admin"

CROSS_DEPARTMENT = "cross-department"
ROLE_INSUFFICIENT = "role-insufficient"


class Action(str, Enum):
    CREATE_DUE = "create_due"
    BULK_CREATE = "bulk_create"
    CONFIRM_PAYMENT = "confirm_payment"
    CLEAR_DUE = "clear_due"
    READ_DUES = "read_dues"
    READ_STATS = "read_stats"
    READ_PEOPLE = "read_people"
    READ_DIRECTORY = "read_directory"


MUTATIONS = {Action.CREATE_DUE, Action.BULK_CREATE, Action.CONFIRM_PAYMENT, Action.CLEAR_DUE}
READS = {Action.READ_DUES, Action.READ_STATS}

# Scope value meaning "every department"
ALL_DEPARTMENTS = "all"


@dataclass(frozen=True)
class Principal:
    role: str
    department: str


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None
    message: str = ""

    def __bool__(self):
        return self.allowed


def _allow() -> Decision:
    return Decision(True)


def _deny(reason: str, message: str) -> Decision:
    return Decision(False, reason, message)


def normalize_department(name: Optional[str]) -> str:
    return (name or "").strip().casefold()


def same_department(a: Optional[str], b: Optional[str]) -> bool:
    return bool(normalize_department(a)) and normalize_department(a) == normalize_department(b)


def is_accounts(principal: Principal) -> bool:
    return same_department(principal.department, ACCOUNTS_DEPARTMENT)


def has_cross_department_read(principal: Principal) -> bool:
    if principal.role == SUPER_ADMIN:
        return True
    if principal.role != DEPARTMENT_OPERATOR:
        return False
    return is_accounts(principal) or same_department(principal.department, ACADEMICS_DEPARTMENT)


def can_perform(principal: Principal, action: Action, due=None, department: Optional[str] = None) -> Decision:
    """
    Decide whether `principal` may perform `action`.

    `due` is the target record for transitions; `department` is the requested
    read scope (a department name or "all") for list and stats reads.
    Rules are evaluated in order and the first match wins.
    """
    action = Action(action)

    if principal.role not in (DEPARTMENT_OPERATOR, SUPER_ADMIN):
        return _deny(ROLE_INSUFFICIENT, "Unknown role")

    if action in MUTATIONS and principal.role != DEPARTMENT_OPERATOR:
        return _deny(ROLE_INSUFFICIENT, "Only department operators can change dues")

    # Rule 1: Accounts confirms payments everywhere and never clears
    if is_accounts(principal):
        if action == Action.CONFIRM_PAYMENT:
            return _allow()
        if action == Action.CLEAR_DUE:
            return _deny(ROLE_INSUFFICIENT, "Accounts operators can only change payment status, not clear dues")

    if action == Action.CONFIRM_PAYMENT:
        return _deny(ROLE_INSUFFICIENT, "Only the Accounts department can confirm payments")

    # Any operator may browse students/faculty to pick who a due is raised against
    if action == Action.READ_DIRECTORY:
        return _allow()

    if action == Action.READ_PEOPLE:
        if is_accounts(principal) or principal.role == SUPER_ADMIN:
            return _allow()
        return _deny(ROLE_INSUFFICIENT, "Only the Accounts department can browse all people")

    # Rule 2: Accounts / Academics (and super admins) read across departments
    if action in READS:
        if has_cross_department_read(principal):
            return _allow()
        if department is None or same_department(department, principal.department):
            return _allow()
        return _deny(CROSS_DEPARTMENT, "You can only view dues of your own department")

    # Rule 3: the owning department clears its own dues
    if action == Action.CLEAR_DUE:
        if due is None:
            return _deny(CROSS_DEPARTMENT, "A target due is required")
        if same_department(due.department, principal.department):
            return _allow()
        return _deny(CROSS_DEPARTMENT, "Dues can only be cleared by their owning department")

    if action in (Action.CREATE_DUE, Action.BULK_CREATE):
        return _allow()

    # Rule 4: everything else
    return _deny(ROLE_INSUFFICIENT, "Action not permitted")


def authorize(principal: Principal, action: Action, due=None, department: Optional[str] = None) -> None:
    """Like can_perform, but raises AuthorizationError on deny"""
    decision = can_perform(principal, action, due=due, department=department)
    if not decision.allowed:
        logger.warning(
            "Denied %s for %s/%s: %s",
            Action(action).value, principal.role, principal.department, decision.reason,
        )
        raise AuthorizationError(decision.message, reason=decision.reason)
