"""
Database Configuration
SQLAlchemy engine, session factory and declarative base
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from expense_approvals.config.settings import settings

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL

    SQLite needs cross-thread connections because FastAPI runs requests
    on a worker pool; in-memory SQLite additionally needs a single shared
    connection or every session would see an empty database.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args=connect_args,
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine"""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
SessionLocal = build_session_factory(engine)


def create_tables(bind: Engine = None):
    """Create all tables registered on Base"""
    # Table classes must be imported so they register on Base.metadata
    from expense_approvals.models import expense, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
