"""
Expense Schemas - Pydantic V2
Request DTOs validated by the validation service and response views
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import Dict, Optional
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP

from expense_approvals.models.expense import ExpenseCategory, ExpenseStatus
from expense_approvals.models.user import UserRole

CENT = Decimal("0.01")


def _normalize_enum_value(value):
    """Accept FOOD, Food or food for enum fields"""
    if isinstance(value, str):
        return value.strip().lower()
    return value


class ExpenseCreate(BaseModel):
    """Create expense request"""
    amount: Decimal = Field(..., ge=CENT, max_digits=12, decimal_places=2)
    category: ExpenseCategory
    description: str = Field(..., min_length=1, max_length=2000)
    expense_date: date

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value):
        return _normalize_enum_value(value)

    @field_validator("amount")
    @classmethod
    def quantize_amount(cls, value: Decimal) -> Decimal:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description must not be blank")
        return value


class ExpenseFilters(BaseModel):
    """Optional filters for listing expenses; bounds are inclusive"""
    category: Optional[ExpenseCategory] = None
    status: Optional[ExpenseStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("category", "status", "start_date", "end_date", mode="before")
    @classmethod
    def blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return _normalize_enum_value(value)

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value: Optional[date], info: ValidationInfo) -> Optional[date]:
        start = info.data.get("start_date")
        if value is not None and start is not None and value < start:
            raise ValueError("end_date must be on or after start_date")
        return value


class ExpenseStatusUpdate(BaseModel):
    """Approve or reject request"""
    status: ExpenseStatus
    rejection_reason: Optional[str] = Field(None, max_length=2000)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return _normalize_enum_value(value)

    @field_validator("status")
    @classmethod
    def status_is_decision(cls, value: ExpenseStatus) -> ExpenseStatus:
        if value == ExpenseStatus.PENDING:
            raise ValueError("Status must be approved or rejected")
        return value


class ExpenseOwnerResponse(BaseModel):
    """Owner fields shown with each expense"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: UserRole


class ExpenseResponse(BaseModel):
    """Expense view"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    category: ExpenseCategory
    description: str
    expense_date: date
    status: ExpenseStatus
    rejection_reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    user: Optional[ExpenseOwnerResponse] = Field(None, validation_alias=AliasChoices("owner", "user"))


class AnalyticsResponse(BaseModel):
    """Aggregates over the caller's visible expenses"""
    model_config = ConfigDict(from_attributes=True)

    total_expenses: int
    total_amount: Decimal
    category_totals: Dict[str, Decimal]
    status_totals: Dict[str, Decimal]
    status_counts: Dict[str, int]
