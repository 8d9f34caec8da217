"""
Authentication Tests
Registration, login and token resolution
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
import threading

import pytest

from expense_approvals.config.database import build_session_factory
from expense_approvals.config.settings import settings
from expense_approvals.container import build_container
from expense_approvals.exceptions import (
    DuplicateIdentity,
    Forbidden,
    IdentityNotFound,
    InactiveAccount,
    InvalidCredentials,
    TokenInvalid,
    ValidationError,
)
from expense_approvals.models.user import UserRole
from expense_approvals.utils.security import PasswordHasher, TokenCodec


class TestRegistration:
    """Test identity registration"""

    def test_register_returns_public_view_and_token(self, auth_service):
        result = auth_service.register("new@example.com", "secret123", "New", "Person")

        assert result.user.email == "new@example.com"
        assert result.user.role == UserRole.EMPLOYEE
        assert result.token
        assert not hasattr(result.user, "password_hash")

    def test_register_admin_role(self, auth_service):
        result = auth_service.register("boss@example.com", "secret123", "Big", "Boss", UserRole.ADMIN)
        assert result.user.role == UserRole.ADMIN

    def test_register_accepts_role_string(self, auth_service):
        result = auth_service.register("boss@example.com", "secret123", "Big", "Boss", "ADMIN")
        assert result.user.role == UserRole.ADMIN

    def test_password_is_hashed(self, auth_service, container):
        auth_service.register("new@example.com", "secret123", "New", "Person")
        stored = container.store.find_identity_by_email("new@example.com")
        assert stored.password_hash != "secret123"
        assert stored.password_hash.startswith("$2")

    def test_duplicate_email_rejected(self, auth_service):
        auth_service.register("dup@example.com", "secret123", "First", "User")
        with pytest.raises(DuplicateIdentity):
            auth_service.register("dup@example.com", "other456", "Second", "User")

    def test_email_match_is_case_sensitive(self, auth_service):
        auth_service.register("case@example.com", "secret123", "Lower", "Case")
        result = auth_service.register("Case@example.com", "secret123", "Upper", "Case")
        assert result.user.email == "Case@example.com"

    def test_validation_lists_every_field(self, auth_service):
        with pytest.raises(ValidationError) as exc_info:
            auth_service.register("not-an-email", "123", "", "Person", "manager")

        assert set(exc_info.value.fields) == {"email", "password", "first_name", "role"}

    def test_failed_validation_writes_nothing(self, auth_service, container):
        with pytest.raises(ValidationError):
            auth_service.register("bad@example.com", "123", "Bad", "Password")
        assert container.store.find_identity_by_email("bad@example.com") is None

    def test_concurrent_duplicate_registration(self, file_engine):
        """Exactly one of two simultaneous registrations wins"""
        container = build_container(settings, build_session_factory(file_engine))
        barrier = threading.Barrier(2)

        def attempt(first_name):
            barrier.wait()
            try:
                return container.auth_service.register("race@example.com", "secret123", first_name, "Racer")
            except DuplicateIdentity as exc:
                return exc

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(attempt, ["One", "Two"]))

        winners = [r for r in results if not isinstance(r, DuplicateIdentity)]
        losers = [r for r in results if isinstance(r, DuplicateIdentity)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert len(container.store.list_identities()) == 1


class TestAuthentication:
    """Test credential checks"""

    def test_login_success_returns_same_identity(self, auth_service):
        registered = auth_service.register("user@example.com", "secret123", "Test", "User")
        result = auth_service.authenticate("user@example.com", "secret123")

        assert result.user.id == registered.user.id
        assert result.token

    def test_login_wrong_password(self, auth_service, employee):
        with pytest.raises(InvalidCredentials):
            auth_service.authenticate(employee.email, "wrongpassword")

    def test_login_nonexistent_user(self, auth_service):
        with pytest.raises(InvalidCredentials):
            auth_service.authenticate("nobody@example.com", "password123")

    def test_unknown_and_wrong_password_look_the_same(self, auth_service, employee):
        with pytest.raises(InvalidCredentials) as unknown:
            auth_service.authenticate("nobody@example.com", "password123")
        with pytest.raises(InvalidCredentials) as wrong:
            auth_service.authenticate(employee.email, "wrongpassword")
        assert unknown.value.message == wrong.value.message

    def test_login_inactive_account(self, auth_service, employee, deactivate):
        deactivate(employee.id)
        with pytest.raises(InactiveAccount):
            auth_service.authenticate(employee.email, "employee123")


class TestTokens:
    """Test token issuing and resolution"""

    def test_resolve_token(self, auth_service):
        result = auth_service.register("user@example.com", "secret123", "Test", "User")
        caller = auth_service.resolve_token(result.token)

        assert caller.id == result.user.id
        assert caller.email == "user@example.com"
        assert caller.role == UserRole.EMPLOYEE

    def test_garbage_token(self, auth_service):
        with pytest.raises(TokenInvalid):
            auth_service.resolve_token("not.a.token")

    def test_empty_token(self, auth_service):
        with pytest.raises(TokenInvalid):
            auth_service.resolve_token("")

    def test_token_signed_with_other_key(self, auth_service, employee):
        forged = TokenCodec("some-other-secret").issue({"sub": str(employee.id)}, timedelta(hours=1))
        with pytest.raises(TokenInvalid):
            auth_service.resolve_token(forged)

    def test_expired_token(self, auth_service, employee):
        expired = auth_service.token_codec.issue({"sub": str(employee.id)}, timedelta(seconds=-10))
        with pytest.raises(TokenInvalid):
            auth_service.resolve_token(expired)

    def test_non_numeric_subject(self, auth_service):
        token = auth_service.token_codec.issue({"sub": "abc"}, timedelta(hours=1))
        with pytest.raises(TokenInvalid):
            auth_service.resolve_token(token)

    def test_unknown_subject(self, auth_service):
        token = auth_service.token_codec.issue({"sub": "4242"}, timedelta(hours=1))
        with pytest.raises(IdentityNotFound):
            auth_service.resolve_token(token)

    def test_deactivation_applies_on_next_request(self, auth_service, deactivate):
        result = auth_service.register("user@example.com", "secret123", "Test", "User")
        auth_service.resolve_token(result.token)

        deactivate(result.user.id)
        with pytest.raises(IdentityNotFound):
            auth_service.resolve_token(result.token)

    def test_token_claims(self, auth_service):
        result = auth_service.register("user@example.com", "secret123", "Test", "User")
        claims = auth_service.token_codec.verify(result.token)

        assert claims["sub"] == str(result.user.id)
        assert claims["email"] == "user@example.com"
        assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())


class TestListIdentities:
    """Test admin user listing"""

    def test_admin_lists_newest_first(self, auth_service, admin, employee, other_employee):
        users = auth_service.list_identities(admin)
        assert [u.email for u in users] == [other_employee.email, employee.email, admin.email]
        assert all(u.is_active for u in users)

    def test_employee_forbidden(self, auth_service, employee):
        with pytest.raises(Forbidden):
            auth_service.list_identities(employee)


class TestPasswordHasher:
    """Test the bcrypt wrapper"""

    def test_verify(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("secret123")
        assert hasher.verify("secret123", hashed)
        assert not hasher.verify("secret124", hashed)

    def test_malformed_hash_never_matches(self):
        assert not PasswordHasher(rounds=4).verify("secret123", "not-a-bcrypt-hash")
