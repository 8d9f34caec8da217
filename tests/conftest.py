"""
Shared test fixtures
Every test gets its own in-memory SQLite database
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before settings are loaded
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-expense-approvals")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FILE", "logs/test.log")

import pytest
from sqlalchemy import update
from fastapi.testclient import TestClient

from expense_approvals.config.database import build_engine, build_session_factory, create_tables
from expense_approvals.config.settings import settings
from expense_approvals.container import build_container
from expense_approvals.domain.entities import Caller
from expense_approvals.main import create_app
from expense_approvals.models.user import User, UserRole


def as_caller(result) -> Caller:
    """Caller for a register/authenticate result"""
    return Caller(
        id=result.user.id,
        email=result.user.email,
        role=result.user.role,
        first_name=result.user.first_name,
        last_name=result.user.last_name,
    )


@pytest.fixture
def make_caller():
    return as_caller


@pytest.fixture
def engine():
    """In-memory database with all tables"""
    test_engine = build_engine("sqlite://")
    create_tables(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed database, needed when several threads hit the store"""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def container(session_factory):
    return build_container(settings, session_factory)


@pytest.fixture
def auth_service(container):
    return container.auth_service


@pytest.fixture
def expense_service(container):
    return container.expense_service


@pytest.fixture
def analytics_service(container):
    return container.analytics_service


@pytest.fixture
def admin(auth_service):
    return as_caller(auth_service.register("admin@example.com", "admin123", "Admin", "User", UserRole.ADMIN))


@pytest.fixture
def employee(auth_service):
    return as_caller(auth_service.register("john.doe@example.com", "employee123", "John", "Doe"))


@pytest.fixture
def other_employee(auth_service):
    return as_caller(auth_service.register("jane.smith@example.com", "employee123", "Jane", "Smith"))


@pytest.fixture
def deactivate(session_factory):
    """Flip a user's active flag off directly in the database"""
    def _deactivate(user_id: int):
        with session_factory() as session:
            session.execute(update(User).where(User.id == user_id).values(is_active=False))
            session.commit()
    return _deactivate


@pytest.fixture
def client(container):
    app = create_app(container)
    with TestClient(app) as test_client:
        yield test_client
