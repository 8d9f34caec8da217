"""
Expense Service
Expense lifecycle: creation, visibility and the pending -> approved/rejected transition
"""

from typing import Callable, List, Optional

from expense_approvals.domain.entities import (
    Caller,
    Expense,
    ExpenseQuery,
    NewExpense,
    StatusDecision,
)
from expense_approvals.exceptions import InvalidTransition, MissingReason, NotFound
from expense_approvals.models.expense import ExpenseStatus
from expense_approvals.repositories.interface import ExpenseOrder, ExpenseStore
from expense_approvals.services.access_control import (
    Operation,
    authorize,
    visible_owner_scope,
)
from expense_approvals.services.validation_service import (
    validate_expense_create,
    validate_expense_filters,
    validate_status_update,
)
from expense_approvals.utils.helpers import format_currency, utcnow
from expense_approvals.utils.logger import setup_logger, log_audit

logger = setup_logger()


class ExpenseService:
    """Service for expense-related business logic"""

    def __init__(self, store: ExpenseStore, clock: Callable = utcnow):
        self.store = store
        self.clock = clock

    def create(self, caller: Caller, payload) -> Expense:
        """
        Submit a new expense on the caller's behalf

        Args:
            caller: Authenticated caller, becomes the owner
            payload: amount, category, description, expense_date

        Returns:
            Expense: Stored pending expense joined with the owner's profile

        Raises:
            ValidationError: Before anything is written
        """
        authorize(caller, Operation.CREATE_EXPENSE, owner_id=caller.id)
        request = validate_expense_create(payload)

        expense = self.store.insert_expense(NewExpense(
            user_id=caller.id,
            amount=request.amount,
            category=request.category,
            description=request.description,
            expense_date=request.expense_date,
            created_at=self.clock(),
        ))

        log_audit(
            caller.id,
            "create_expense",
            expense_id=expense.id,
            amount=format_currency(expense.amount),
            category=expense.category.value,
        )
        logger.info(f"Expense {expense.id} submitted by user {caller.id}")
        return expense

    def list_visible(self, caller: Caller, filters=None) -> List[Expense]:
        """
        Expenses the caller may see, newest first

        Employees only ever get their own records, whatever the filters say.
        """
        owner_scope = visible_owner_scope(caller, Operation.LIST_EXPENSES)
        request = validate_expense_filters(filters)

        return self.store.query_expenses(
            ExpenseQuery(
                user_id=owner_scope,
                category=request.category,
                status=request.status,
                start_date=request.start_date,
                end_date=request.end_date,
            ),
            ExpenseOrder.NEWEST_FIRST,
        )

    def get_one(self, expense_id: int, caller: Caller) -> Expense:
        """
        Raises:
            NotFound: Unknown id
            Forbidden: Employee asking for someone else's expense
        """
        expense = self.store.find_expense_by_id(expense_id)
        if expense is None:
            raise NotFound()

        authorize(caller, Operation.READ_EXPENSE, owner_id=expense.user_id)
        return expense

    def transition(
        self,
        expense_id: int,
        caller: Caller,
        status,
        rejection_reason: Optional[str] = None,
    ) -> Expense:
        """
        Approve or reject a pending expense

        The admin check happens before the record is read so that
        non-admins learn nothing about which ids exist. The pending
        guard and the write are a single conditional update: of two
        concurrent decisions exactly one wins and the other gets
        InvalidTransition. A rejection without a reason is only reported
        once the expense is known to exist and still be pending.

        Raises:
            Forbidden: Caller is not an admin
            ValidationError: Status is not approved/rejected
            NotFound: Unknown id
            InvalidTransition: Expense already decided
            MissingReason: Rejecting a pending expense without a reason
        """
        authorize(caller, Operation.TRANSITION_EXPENSE)
        request = validate_status_update({"status": status, "rejection_reason": rejection_reason})

        reason = None
        if request.status == ExpenseStatus.REJECTED:
            reason = (request.rejection_reason or "").strip()
            if not reason:
                self._ensure_pending(expense_id)
                raise MissingReason()

        decision = StatusDecision(
            status=request.status,
            approved_by=caller.id,
            approved_at=self.clock(),
            rejection_reason=reason,
        )
        updated = self.store.conditional_update_expense_status(
            expense_id, ExpenseStatus.PENDING, decision
        )

        if updated is None:
            self._ensure_pending(expense_id)
            raise InvalidTransition()

        log_audit(
            caller.id,
            f"{request.status.value}_expense",
            expense_id=expense_id,
            **({"reason": reason} if reason else {}),
        )
        logger.info(f"Expense {expense_id} {request.status.value} by admin {caller.id}")
        return updated

    def _ensure_pending(self, expense_id: int) -> Expense:
        """
        Raises:
            NotFound: Unknown id
            InvalidTransition: Expense already decided
        """
        current = self.store.find_expense_by_id(expense_id)
        if current is None:
            raise NotFound()
        if current.status != ExpenseStatus.PENDING:
            logger.info(f"Transition of expense {expense_id} refused, already {current.status.value}")
            raise InvalidTransition()
        return current

    def list_pending(self, caller: Caller) -> List[Expense]:
        """
        Pending queue, oldest first so it is worked in submission order

        Raises:
            Forbidden: Caller is not an admin
        """
        authorize(caller, Operation.VIEW_PENDING)
        return self.store.query_expenses(
            ExpenseQuery(status=ExpenseStatus.PENDING),
            ExpenseOrder.OLDEST_FIRST,
        )
