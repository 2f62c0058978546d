"""
Tests for the authorization gate.

Tests validate:
- Accounts confirms payments and never clears
- Owning department clears its own dues only
- Cross-department reads for Accounts/Academics/super admin
- Role checks on mutations
- authorize() raising AuthorizationError with a reason tag
"""

import pytest

from conftest import make_due, operator
from services.authorization import (
    ALL_DEPARTMENTS,
    CROSS_DEPARTMENT,
    ROLE_INSUFFICIENT,
    SUPER_ADMIN,
    Action,
    Principal,
    authorize,
    can_perform,
    has_cross_department_read,
    same_department,
)
from services.errors import AuthorizationError


class TestDepartmentMatching:
    """Department names compare trimmed and case-insensitively."""

    def test_case_and_whitespace_are_ignored(self):
        assert same_department(" Library ", "LIBRARY")

    def test_empty_never_matches(self):
        assert not same_department("", "")
        assert not same_department(None, "LIBRARY")


class TestAccountsRules:
    """Accounts holds payment confirmation and nothing else."""

    def test_accounts_confirms_any_department(self):
        due = make_due(department="HOSTEL")
        assert can_perform(operator("ACCOUNTS"), Action.CONFIRM_PAYMENT, due=due).allowed

    def test_accounts_never_clears(self):
        """Even a due owned by Accounts itself cannot be cleared by Accounts."""
        for department in ("LIBRARY", "ACCOUNTS"):
            decision = can_perform(operator("Accounts"), Action.CLEAR_DUE, due=make_due(department=department))
            assert not decision.allowed
            assert decision.reason == ROLE_INSUFFICIENT
            assert "not clear dues" in decision.message

    def test_other_departments_cannot_confirm(self):
        due = make_due(department="LIBRARY")
        decision = can_perform(operator("LIBRARY"), Action.CONFIRM_PAYMENT, due=due)
        assert not decision.allowed
        assert decision.reason == ROLE_INSUFFICIENT


class TestClearanceRules:
    """Only the owning department clears."""

    def test_owner_can_clear(self):
        due = make_due(department="LIBRARY")
        assert can_perform(operator("library"), Action.CLEAR_DUE, due=due)

    def test_other_department_cannot_clear(self):
        due = make_due(department="LIBRARY")
        decision = can_perform(operator("HOSTEL"), Action.CLEAR_DUE, due=due)
        assert not decision.allowed
        assert decision.reason == CROSS_DEPARTMENT

    def test_academics_cannot_clear_other_departments(self):
        decision = can_perform(operator("ACADEMICS"), Action.CLEAR_DUE, due=make_due(department="LIBRARY"))
        assert decision.reason == CROSS_DEPARTMENT


class TestReadRules:
    """Reads are scoped unless the caller has cross-department rights."""

    @pytest.mark.parametrize("department", ["ACCOUNTS", "ACADEMICS"])
    def test_cross_department_readers(self, department):
        principal = operator(department)
        assert has_cross_department_read(principal)
        assert can_perform(principal, Action.READ_DUES, department="LIBRARY")
        assert can_perform(principal, Action.READ_STATS, department=ALL_DEPARTMENTS)

    def test_operator_reads_own_department(self):
        assert can_perform(operator("LIBRARY"), Action.READ_DUES, department="Library")
        assert can_perform(operator("LIBRARY"), Action.READ_DUES)

    def test_operator_cannot_read_other_department(self):
        decision = can_perform(operator("LIBRARY"), Action.READ_STATS, department="HOSTEL")
        assert not decision.allowed
        assert decision.reason == CROSS_DEPARTMENT

    def test_operator_cannot_read_all(self):
        assert not can_perform(operator("LIBRARY"), Action.READ_DUES, department=ALL_DEPARTMENTS)

    def test_people_lists_are_accounts_only(self):
        assert can_perform(operator("ACCOUNTS"), Action.READ_PEOPLE)
        assert not can_perform(operator("ACADEMICS"), Action.READ_PEOPLE)


class TestRoles:
    """Role checks apply before department rules."""

    def test_super_admin_reads_everything(self):
        admin = Principal(role=SUPER_ADMIN, department="ADMIN")
        assert can_perform(admin, Action.READ_DUES, department="LIBRARY")
        assert can_perform(admin, Action.READ_PEOPLE)

    def test_super_admin_cannot_mutate(self):
        admin = Principal(role=SUPER_ADMIN, department="ADMIN")
        decision = can_perform(admin, Action.CREATE_DUE)
        assert not decision.allowed
        assert decision.reason == ROLE_INSUFFICIENT

    def test_unknown_role_is_denied(self):
        principal = Principal(role="student", department="LIBRARY")
        assert not can_perform(principal, Action.READ_DUES, department="LIBRARY")

    def test_every_operator_reads_directory(self):
        for department in ("LIBRARY", "HR", "ACCOUNTS", "ACADEMICS"):
            assert can_perform(operator(department), Action.READ_DIRECTORY)
        assert can_perform(Principal(role=SUPER_ADMIN, department="ADMIN"), Action.READ_DIRECTORY)
        assert not can_perform(Principal(role="student", department="LIBRARY"), Action.READ_DIRECTORY)

    def test_any_operator_can_create(self):
        assert can_perform(operator("LIBRARY"), Action.CREATE_DUE)
        assert can_perform(operator("HR"), Action.BULK_CREATE)


class TestAuthorize:
    """authorize() raises on deny."""

    def test_raises_with_reason(self):
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(operator("HOSTEL"), Action.CLEAR_DUE, due=make_due(department="LIBRARY"))
        assert exc_info.value.status_code == 403
        assert exc_info.value.reason == CROSS_DEPARTMENT

    def test_allowed_returns_none(self):
        assert authorize(operator("ACCOUNTS"), Action.CONFIRM_PAYMENT, due=make_due()) is None
