"""
Authentication Routes
Registration, login and user listing
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from expense_approvals.container import Container
from expense_approvals.domain.entities import Caller
from expense_approvals.routes.deps import get_container, get_current_caller
from expense_approvals.schemas.auth import AuthResponse
from expense_approvals.schemas.user import UserLogin, UserResponse, UserSummaryResponse
from expense_approvals.services.validation_service import validate_payload

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: Dict[str, Any] = Body(...),
    container: Container = Depends(get_container),
):
    """Create an account and return a token for it"""
    result = container.auth_service.register(
        email=payload.get("email"),
        password=payload.get("password"),
        first_name=payload.get("first_name"),
        last_name=payload.get("last_name"),
        role=payload.get("role"),
    )
    return AuthResponse.model_validate(result)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: Dict[str, Any] = Body(...),
    container: Container = Depends(get_container),
):
    """Exchange email and password for a token"""
    credentials = validate_payload(UserLogin, payload)
    result = container.auth_service.authenticate(credentials.email, credentials.password)
    return AuthResponse.model_validate(result)


@router.get("/me", response_model=UserResponse)
def get_me(
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """Current user's profile"""
    return container.auth_service.get_profile(caller)


@router.get("/users", response_model=List[UserSummaryResponse])
def list_users(
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """All users, newest first (admin only)"""
    return container.auth_service.list_identities(caller)
