"""
Abstract Store Interface

The services only talk to this interface. Every method either returns a
value, a collection, or None for "not found"; no method opens a
transaction that spans more than one call.
"""

from abc import ABC, abstractmethod
import enum
from typing import List, Optional

from expense_approvals.domain.entities import (
    Expense,
    ExpenseQuery,
    Identity,
    NewExpense,
    NewIdentity,
    StatusDecision,
)
from expense_approvals.models.expense import ExpenseStatus


class ExpenseOrder(str, enum.Enum):
    """Sort order on creation time"""
    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"


class ExpenseStore(ABC):
    """Persistence operations needed by the identity and expense services"""

    @abstractmethod
    def find_identity_by_email(self, email: str) -> Optional[Identity]:
        """Exact, case-sensitive email lookup"""

    @abstractmethod
    def find_identity_by_id(self, identity_id: int) -> Optional[Identity]:
        pass

    @abstractmethod
    def insert_identity(self, identity: NewIdentity) -> Identity:
        """
        Persist a new identity

        Raises:
            DuplicateIdentity: If the email is already taken, including when
                another insert for the same email commits first
        """

    @abstractmethod
    def list_identities(self) -> List[Identity]:
        """All identities, newest-created first"""

    @abstractmethod
    def find_expense_by_id(self, expense_id: int) -> Optional[Expense]:
        """Expense joined with its owner's profile"""

    @abstractmethod
    def insert_expense(self, expense: NewExpense) -> Expense:
        """Persist a new expense and return it joined with its owner's profile"""

    @abstractmethod
    def conditional_update_expense_status(
        self,
        expense_id: int,
        expected_status: ExpenseStatus,
        decision: StatusDecision,
    ) -> Optional[Expense]:
        """
        Write the decision only if the expense is still in expected_status

        The check and the write must be a single statement so that
        concurrent callers cannot both succeed.

        Returns:
            The updated expense, or None if no row matched
        """

    @abstractmethod
    def query_expenses(
        self,
        query: ExpenseQuery,
        order: ExpenseOrder = ExpenseOrder.NEWEST_FIRST,
    ) -> List[Expense]:
        """Expenses matching every non-None field of the query"""
