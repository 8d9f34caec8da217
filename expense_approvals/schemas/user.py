"""
User Schemas
Pydantic models for user-related requests and responses
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from email_validator import EmailNotValidError, validate_email

from expense_approvals.models.user import UserRole


def _lower_if_str(value):
    return value.lower() if isinstance(value, str) else value


class UserCreate(BaseModel):
    """Registration request"""
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        """Reject malformed addresses but store the email exactly as given"""
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        # bcrypt only looks at the first 72 bytes
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return value

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Must not be blank")
        return value

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        return _lower_if_str(value)


class UserLogin(BaseModel):
    """Login request schema"""
    email: str
    password: str


class UserResponse(BaseModel):
    """Public identity view"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole


class UserSummaryResponse(UserResponse):
    """Identity view returned to admins listing users"""
    is_active: bool
    created_at: datetime
