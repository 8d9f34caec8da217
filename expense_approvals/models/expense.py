"""
Expense Model
Stores expense claims submitted by employees
"""

from sqlalchemy import Column, Integer, Numeric, Date, DateTime, Enum, ForeignKey, Text
from datetime import datetime
import enum

from expense_approvals.config.database import Base


class ExpenseCategory(str, enum.Enum):
    """Expense categories"""
    TRAVEL = "travel"
    FOOD = "food"
    OFFICE_SUPPLIES = "office_supplies"
    SOFTWARE = "software"
    EQUIPMENT = "equipment"
    MARKETING = "marketing"
    UTILITIES = "utilities"
    OTHER = "other"


class ExpenseStatus(str, enum.Enum):
    """Expense status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Expense(Base):
    """Expense table"""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)

    # Owner
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Expense details
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(
        Enum(ExpenseCategory, values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    description = Column(Text, nullable=False)
    expense_date = Column(Date, nullable=False, index=True)

    # Status and decision
    status = Column(
        Enum(ExpenseStatus, values_callable=_enum_values),
        default=ExpenseStatus.PENDING,
        nullable=False,
        index=True,
    )
    rejection_reason = Column(Text, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Expense {self.id} - {self.category.value} - {self.status.value}>"
