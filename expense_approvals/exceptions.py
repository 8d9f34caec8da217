"""
Domain Exceptions
Errors raised by the identity, access-control and expense services.
The HTTP layer maps them to status codes in main.py.
"""

from typing import Dict, List, Optional


class ExpenseApprovalsError(Exception):
    """Base exception for the service core"""

    error_code: str = "ERROR"
    default_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
        }


class DuplicateIdentity(ExpenseApprovalsError):
    """Email is already registered"""

    error_code = "DUPLICATE_IDENTITY"
    default_message = "User with this email already exists"


class InvalidCredentials(ExpenseApprovalsError):
    """Unknown email or wrong password"""

    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class InactiveAccount(ExpenseApprovalsError):
    """Account exists but is disabled"""

    error_code = "INACTIVE_ACCOUNT"
    default_message = "Account is inactive"


class TokenInvalid(ExpenseApprovalsError):
    """Bearer token failed signature, format or expiry checks"""

    error_code = "TOKEN_INVALID"
    default_message = "Invalid or expired token"


class IdentityNotFound(ExpenseApprovalsError):
    """Token subject no longer resolves to an active identity"""

    error_code = "IDENTITY_NOT_FOUND"
    default_message = "User not found or inactive"


class Forbidden(ExpenseApprovalsError):
    """Caller's role or ownership does not permit the operation"""

    error_code = "FORBIDDEN"
    default_message = "You are not allowed to perform this operation"


class NotFound(ExpenseApprovalsError):
    """Requested record does not exist"""

    error_code = "NOT_FOUND"
    default_message = "Expense not found"


class InvalidTransition(ExpenseApprovalsError):
    """Expense is no longer pending"""

    error_code = "INVALID_TRANSITION"
    default_message = "Only pending expenses can be approved or rejected"


class MissingReason(ExpenseApprovalsError):
    """Rejection submitted without a reason"""

    error_code = "MISSING_REASON"
    default_message = "Rejection reason is required when rejecting an expense"


class ValidationError(ExpenseApprovalsError):
    """
    Input failed validation

    Carries every violated field, not just the first one:
    [{"field": "amount", "message": "..."}, ...]
    """

    error_code = "VALIDATION_ERROR"
    default_message = "Validation error"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload
