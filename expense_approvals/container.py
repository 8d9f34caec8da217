"""
Composition Root
Builds the store and services with explicit constructor wiring
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import sessionmaker

from expense_approvals.config.settings import Settings, settings as default_settings
from expense_approvals.repositories.interface import ExpenseStore
from expense_approvals.repositories.sql_store import SQLAlchemyExpenseStore
from expense_approvals.services.analytics_service import AnalyticsService
from expense_approvals.services.auth_service import AuthService
from expense_approvals.services.expense_service import ExpenseService
from expense_approvals.utils.security import PasswordHasher, TokenCodec


@dataclass
class Container:
    store: ExpenseStore
    auth_service: AuthService
    expense_service: ExpenseService
    analytics_service: AnalyticsService


def build_container(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
) -> Container:
    """
    Wire the services for one application instance

    Args:
        settings: Defaults to the process settings
        session_factory: Defaults to the session factory for settings.DATABASE_URL
    """
    settings = settings or default_settings
    if session_factory is None:
        from expense_approvals.config.database import SessionLocal
        session_factory = SessionLocal

    store = SQLAlchemyExpenseStore(session_factory)
    auth_service = AuthService(
        store=store,
        password_hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        token_codec=TokenCodec(settings.SECRET_KEY, settings.ALGORITHM),
        token_ttl=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )

    return Container(
        store=store,
        auth_service=auth_service,
        expense_service=ExpenseService(store),
        analytics_service=AnalyticsService(store),
    )
