"""
Access Control Tests
The policy table evaluated in isolation
"""

import pytest

from expense_approvals.domain.entities import Caller
from expense_approvals.exceptions import Forbidden
from expense_approvals.models.user import UserRole
from expense_approvals.services.access_control import (
    Operation,
    authorize,
    is_allowed,
    visible_owner_scope,
)

EMPLOYEE = Caller(id=1, email="e@example.com", role=UserRole.EMPLOYEE)
ADMIN = Caller(id=2, email="a@example.com", role=UserRole.ADMIN)

ADMIN_ONLY = [Operation.TRANSITION_EXPENSE, Operation.LIST_IDENTITIES, Operation.VIEW_PENDING]


class TestPolicyTable:
    """Decisions per role and operation"""

    @pytest.mark.parametrize("caller", [EMPLOYEE, ADMIN])
    def test_anyone_creates_for_self(self, caller):
        assert is_allowed(caller, Operation.CREATE_EXPENSE, owner_id=caller.id)

    def test_employee_cannot_create_for_someone_else(self):
        assert not is_allowed(EMPLOYEE, Operation.CREATE_EXPENSE, owner_id=ADMIN.id)

    def test_employee_reads_own_expense(self):
        assert is_allowed(EMPLOYEE, Operation.READ_EXPENSE, owner_id=EMPLOYEE.id)

    def test_employee_cannot_read_other_expense(self):
        assert not is_allowed(EMPLOYEE, Operation.READ_EXPENSE, owner_id=99)
        with pytest.raises(Forbidden):
            authorize(EMPLOYEE, Operation.READ_EXPENSE, owner_id=99)

    def test_admin_reads_any_expense(self):
        assert is_allowed(ADMIN, Operation.READ_EXPENSE, owner_id=99)

    @pytest.mark.parametrize("operation", ADMIN_ONLY)
    def test_admin_only_operations(self, operation):
        assert is_allowed(ADMIN, operation)
        assert not is_allowed(EMPLOYEE, operation)

    @pytest.mark.parametrize("operation", ADMIN_ONLY)
    def test_employee_denied_even_on_own_records(self, operation):
        assert not is_allowed(EMPLOYEE, operation, owner_id=EMPLOYEE.id)

    def test_authorize_passes_silently(self):
        authorize(ADMIN, Operation.TRANSITION_EXPENSE)

    def test_denial_carries_message(self):
        with pytest.raises(Forbidden) as exc_info:
            authorize(EMPLOYEE, Operation.TRANSITION_EXPENSE)
        assert "administrators" in exc_info.value.message


class TestVisibleScope:
    """Owner restriction for collection reads"""

    @pytest.mark.parametrize("operation", [Operation.LIST_EXPENSES, Operation.VIEW_ANALYTICS])
    def test_employee_scoped_to_self(self, operation):
        assert visible_owner_scope(EMPLOYEE, operation) == EMPLOYEE.id

    @pytest.mark.parametrize("operation", [Operation.LIST_EXPENSES, Operation.VIEW_ANALYTICS])
    def test_admin_unscoped(self, operation):
        assert visible_owner_scope(ADMIN, operation) is None

    def test_employee_pending_queue_forbidden(self):
        with pytest.raises(Forbidden):
            visible_owner_scope(EMPLOYEE, Operation.VIEW_PENDING)
