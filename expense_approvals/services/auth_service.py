"""
Authentication Service
Registers identities, checks credentials, issues and resolves bearer tokens
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional

from expense_approvals.domain.entities import Caller, Identity, NewIdentity
from expense_approvals.exceptions import (
    DuplicateIdentity,
    IdentityNotFound,
    InactiveAccount,
    InvalidCredentials,
    TokenInvalid,
)
from expense_approvals.models.user import UserRole
from expense_approvals.repositories.interface import ExpenseStore
from expense_approvals.schemas.user import UserResponse, UserSummaryResponse
from expense_approvals.services.access_control import Operation, authorize
from expense_approvals.services.validation_service import validate_registration
from expense_approvals.utils.helpers import utcnow
from expense_approvals.utils.logger import setup_logger, log_audit
from expense_approvals.utils.security import PasswordHasher, TokenCodec

logger = setup_logger()

DEFAULT_TOKEN_TTL = timedelta(days=7)


@dataclass(frozen=True)
class AuthResult:
    """Public identity view plus a freshly issued token"""

    user: UserResponse
    token: str


class AuthService:
    """Identity and token service"""

    def __init__(
        self,
        store: ExpenseStore,
        password_hasher: PasswordHasher,
        token_codec: TokenCodec,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable = utcnow,
    ):
        self.store = store
        self.password_hasher = password_hasher
        self.token_codec = token_codec
        self.token_ttl = token_ttl
        self.clock = clock

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Optional[UserRole] = None,
    ) -> AuthResult:
        """
        Register a new identity and log it in

        Args:
            email: Unique email, compared case-sensitively
            password: Raw password, hashed before storage
            first_name: First name
            last_name: Last name
            role: Defaults to employee

        Returns:
            AuthResult: Public view and token

        Raises:
            ValidationError: If any field is malformed
            DuplicateIdentity: If the email is already registered
        """
        request = validate_registration({
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
        })

        if self.store.find_identity_by_email(request.email) is not None:
            logger.info(f"Registration rejected, email already in use: {request.email}")
            raise DuplicateIdentity()

        identity = self.store.insert_identity(NewIdentity(
            email=request.email,
            password_hash=self.password_hasher.hash(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role or UserRole.EMPLOYEE,
            is_active=True,
            created_at=self.clock(),
        ))

        log_audit(identity.id, "register", email=identity.email, role=identity.role.value)
        logger.info(f"User registered: {identity.email} ({identity.role.value})")
        return AuthResult(user=self._public_view(identity), token=self._issue_token(identity))

    def authenticate(self, email: str, password: str) -> AuthResult:
        """
        Check credentials and issue a token

        Raises:
            InvalidCredentials: Unknown email or wrong password
            InactiveAccount: Account has been disabled
        """
        identity = self.store.find_identity_by_email(email)

        if identity is None:
            logger.warning("Login failed: unknown email")
            raise InvalidCredentials()

        if not identity.is_active:
            logger.warning(f"Login failed: inactive account {identity.id}")
            raise InactiveAccount()

        if not self.password_hasher.verify(password, identity.password_hash):
            logger.warning(f"Login failed: wrong password for user {identity.id}")
            raise InvalidCredentials()

        logger.info(f"User authenticated: {identity.email}")
        return AuthResult(user=self._public_view(identity), token=self._issue_token(identity))

    def resolve_token(self, token: str) -> Caller:
        """
        Turn a bearer token into the current caller

        Runs on every authenticated request and re-reads the identity,
        so deactivation takes effect on the next request.

        Raises:
            TokenInvalid: Signature, format or expiry check failed
            IdentityNotFound: Subject is missing or inactive
        """
        if not token:
            raise TokenInvalid()

        claims = self.token_codec.verify(token)

        try:
            identity_id = int(claims.get("sub"))
        except (TypeError, ValueError):
            raise TokenInvalid()

        identity = self.store.find_identity_by_id(identity_id)
        if identity is None or not identity.is_active:
            raise IdentityNotFound()

        return Caller(
            id=identity.id,
            email=identity.email,
            role=identity.role,
            first_name=identity.first_name,
            last_name=identity.last_name,
        )

    def list_identities(self, caller: Caller) -> List[UserSummaryResponse]:
        """
        All identities, newest first, without password hashes

        Raises:
            Forbidden: If the caller is not an admin
        """
        authorize(caller, Operation.LIST_IDENTITIES)
        return [UserSummaryResponse.model_validate(identity) for identity in self.store.list_identities()]

    def get_profile(self, caller: Caller) -> UserResponse:
        """Public view of the caller"""
        return UserResponse(
            id=caller.id,
            email=caller.email,
            first_name=caller.first_name,
            last_name=caller.last_name,
            role=caller.role,
        )

    def _issue_token(self, identity: Identity) -> str:
        return self.token_codec.issue(
            {"sub": str(identity.id), "email": identity.email},
            self.token_ttl,
        )

    @staticmethod
    def _public_view(identity: Identity) -> UserResponse:
        return UserResponse.model_validate(identity)
