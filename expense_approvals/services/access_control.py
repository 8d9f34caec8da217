"""
Access Control
Single policy table deciding what each role may do.
Pure functions, no I/O; services call these instead of comparing roles.
"""

import enum
from typing import Optional

from expense_approvals.domain.entities import Caller
from expense_approvals.exceptions import Forbidden
from expense_approvals.models.user import UserRole


class Operation(str, enum.Enum):
    """Operation classes checked by the evaluator"""
    CREATE_EXPENSE = "create_expense"
    READ_EXPENSE = "read_expense"
    LIST_EXPENSES = "list_expenses"
    VIEW_ANALYTICS = "view_analytics"
    TRANSITION_EXPENSE = "transition_expense"
    LIST_IDENTITIES = "list_identities"
    VIEW_PENDING = "view_pending"


class Grant(str, enum.Enum):
    """How a role may perform an operation"""
    ANY = "any"    # unrestricted
    OWN = "own"    # only on records the caller owns
    DENY = "deny"


POLICY = {
    Operation.CREATE_EXPENSE: {UserRole.EMPLOYEE: Grant.OWN, UserRole.ADMIN: Grant.OWN},
    Operation.READ_EXPENSE: {UserRole.EMPLOYEE: Grant.OWN, UserRole.ADMIN: Grant.ANY},
    Operation.LIST_EXPENSES: {UserRole.EMPLOYEE: Grant.OWN, UserRole.ADMIN: Grant.ANY},
    Operation.VIEW_ANALYTICS: {UserRole.EMPLOYEE: Grant.OWN, UserRole.ADMIN: Grant.ANY},
    Operation.TRANSITION_EXPENSE: {UserRole.EMPLOYEE: Grant.DENY, UserRole.ADMIN: Grant.ANY},
    Operation.LIST_IDENTITIES: {UserRole.EMPLOYEE: Grant.DENY, UserRole.ADMIN: Grant.ANY},
    Operation.VIEW_PENDING: {UserRole.EMPLOYEE: Grant.DENY, UserRole.ADMIN: Grant.ANY},
}

DENIAL_MESSAGES = {
    Operation.CREATE_EXPENSE: "You can only create expenses for yourself",
    Operation.READ_EXPENSE: "You can only view your own expenses",
    Operation.TRANSITION_EXPENSE: "Only administrators can approve or reject expenses",
    Operation.LIST_IDENTITIES: "Only administrators can list users",
    Operation.VIEW_PENDING: "Only administrators can view the pending queue",
}


def grant_for(role: UserRole, operation: Operation) -> Grant:
    """Unknown roles or operations are denied"""
    return POLICY.get(operation, {}).get(role, Grant.DENY)


def is_allowed(caller: Caller, operation: Operation, owner_id: Optional[int] = None) -> bool:
    """
    Decide whether the caller may perform the operation

    Args:
        caller: Resolved caller identity and role
        operation: Operation class
        owner_id: Owner of the target record, if the operation has one

    Returns:
        bool: True if permitted
    """
    grant = grant_for(caller.role, operation)
    if grant == Grant.ANY:
        return True
    if grant == Grant.OWN:
        return owner_id is None or owner_id == caller.id
    return False


def authorize(caller: Caller, operation: Operation, owner_id: Optional[int] = None):
    """
    Raise Forbidden unless the caller may perform the operation

    Raises:
        Forbidden: If the policy denies the operation
    """
    if not is_allowed(caller, operation, owner_id):
        raise Forbidden(DENIAL_MESSAGES.get(operation))


def visible_owner_scope(caller: Caller, operation: Operation) -> Optional[int]:
    """
    Owner restriction to apply to a collection read

    Returns:
        The caller's id when the role only sees its own records,
        None when the role sees every record

    Raises:
        Forbidden: If the role may not read the collection at all
    """
    grant = grant_for(caller.role, operation)
    if grant == Grant.ANY:
        return None
    if grant == Grant.OWN:
        return caller.id
    raise Forbidden(DENIAL_MESSAGES.get(operation))
