"""
Authentication Schemas
Pydantic models for authentication responses
"""

from pydantic import BaseModel, ConfigDict

from expense_approvals.schemas.user import UserResponse


class AuthResponse(BaseModel):
    """Returned by register and login"""
    model_config = ConfigDict(from_attributes=True)

    user: UserResponse
    token: str
    token_type: str = "bearer"
