"""
Domain Entities
Plain records passed between the store and the services.
Table classes in models/ never leave the repository layer.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from expense_approvals.models.expense import ExpenseCategory, ExpenseStatus
from expense_approvals.models.user import UserRole


@dataclass(frozen=True)
class Identity:
    """Stored identity, including the password hash"""

    id: int
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class NewIdentity:
    """Identity fields supplied on insert; the store assigns the id"""

    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Caller:
    """Authenticated caller resolved from a bearer token"""

    id: int
    email: str
    role: UserRole
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True)
class OwnerProfile:
    """Public profile fields shown next to an expense"""

    id: int
    first_name: str
    last_name: str
    email: str
    role: UserRole


@dataclass(frozen=True)
class Expense:
    id: int
    user_id: int
    amount: Decimal
    category: ExpenseCategory
    description: str
    expense_date: date
    status: ExpenseStatus
    created_at: datetime
    rejection_reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    owner: Optional[OwnerProfile] = None


@dataclass(frozen=True)
class NewExpense:
    user_id: int
    amount: Decimal
    category: ExpenseCategory
    description: str
    expense_date: date
    created_at: datetime
    status: ExpenseStatus = ExpenseStatus.PENDING


@dataclass(frozen=True)
class StatusDecision:
    """Fields written by a successful status transition"""

    status: ExpenseStatus
    approved_by: int
    approved_at: datetime
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class ExpenseQuery:
    """Filter applied by the store; None means no restriction"""

    user_id: Optional[int] = None
    category: Optional[ExpenseCategory] = None
    status: Optional[ExpenseStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class AnalyticsSummary:
    total_expenses: int = 0
    total_amount: Decimal = Decimal("0.00")
    category_totals: dict = field(default_factory=dict)
    status_totals: dict = field(default_factory=dict)
    status_counts: dict = field(default_factory=dict)
