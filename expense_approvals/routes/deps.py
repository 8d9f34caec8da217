"""
Route Dependencies
Resolve the container and the authenticated caller for each request
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from expense_approvals.container import Container
from expense_approvals.domain.entities import Caller
from expense_approvals.exceptions import TokenInvalid

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    container: Container = Depends(get_container),
) -> Caller:
    """
    Resolve the bearer token into a caller

    Raises:
        TokenInvalid: Missing or bad token
        IdentityNotFound: Token subject gone or inactive
    """
    if credentials is None:
        raise TokenInvalid("Missing bearer token")
    return container.auth_service.resolve_token(credentials.credentials)
