"""
SQLAlchemy Store
ExpenseStore backed by a relational database.
Each call runs in its own short-lived session.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from expense_approvals.domain.entities import (
    Expense,
    ExpenseQuery,
    Identity,
    NewExpense,
    NewIdentity,
    OwnerProfile,
    StatusDecision,
)
from expense_approvals.exceptions import DuplicateIdentity
from expense_approvals.models.expense import Expense as ExpenseRow, ExpenseStatus
from expense_approvals.models.user import User as UserRow
from expense_approvals.repositories.interface import ExpenseOrder, ExpenseStore
from expense_approvals.utils.logger import setup_logger

logger = setup_logger()


def _row_to_identity(row: UserRow) -> Identity:
    return Identity(
        id=row.id,
        email=row.email,
        password_hash=row.hashed_password,
        first_name=row.first_name,
        last_name=row.last_name,
        role=row.role,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def _row_to_expense(row: ExpenseRow, owner: Optional[UserRow] = None) -> Expense:
    profile = None
    if owner is not None:
        profile = OwnerProfile(
            id=owner.id,
            first_name=owner.first_name,
            last_name=owner.last_name,
            email=owner.email,
            role=owner.role,
        )

    return Expense(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        category=row.category,
        description=row.description,
        expense_date=row.expense_date,
        status=row.status,
        created_at=row.created_at,
        rejection_reason=row.rejection_reason,
        approved_by=row.approved_by,
        approved_at=row.approved_at,
        owner=profile,
    )


class SQLAlchemyExpenseStore(ExpenseStore):
    """Relational implementation of the store interface"""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ---- identities ----

    def find_identity_by_email(self, email: str) -> Optional[Identity]:
        with self._session() as session:
            row = session.execute(
                select(UserRow).where(UserRow.email == email)
            ).scalar_one_or_none()
            return _row_to_identity(row) if row else None

    def find_identity_by_id(self, identity_id: int) -> Optional[Identity]:
        with self._session() as session:
            row = session.get(UserRow, identity_id)
            return _row_to_identity(row) if row else None

    def insert_identity(self, identity: NewIdentity) -> Identity:
        row = UserRow(
            email=identity.email,
            hashed_password=identity.password_hash,
            first_name=identity.first_name,
            last_name=identity.last_name,
            role=identity.role,
            is_active=identity.is_active,
            created_at=identity.created_at,
        )
        try:
            with self._session() as session:
                session.add(row)
                session.flush()
                stored = _row_to_identity(row)
        except IntegrityError as exc:
            logger.warning(f"Rejected duplicate registration for {identity.email}")
            raise DuplicateIdentity() from exc
        return stored

    def list_identities(self) -> List[Identity]:
        with self._session() as session:
            rows = session.execute(
                select(UserRow).order_by(UserRow.created_at.desc(), UserRow.id.desc())
            ).scalars().all()
            return [_row_to_identity(row) for row in rows]

    # ---- expenses ----

    def _select_with_owner(self):
        return select(ExpenseRow, UserRow).join(UserRow, ExpenseRow.user_id == UserRow.id)

    def _load_expense(self, session: Session, expense_id: int) -> Optional[Expense]:
        result = session.execute(
            self._select_with_owner().where(ExpenseRow.id == expense_id)
        ).first()
        if result is None:
            return None
        expense_row, owner_row = result
        return _row_to_expense(expense_row, owner_row)

    def find_expense_by_id(self, expense_id: int) -> Optional[Expense]:
        with self._session() as session:
            return self._load_expense(session, expense_id)

    def insert_expense(self, expense: NewExpense) -> Expense:
        row = ExpenseRow(
            user_id=expense.user_id,
            amount=expense.amount,
            category=expense.category,
            description=expense.description,
            expense_date=expense.expense_date,
            status=expense.status,
            created_at=expense.created_at,
        )
        with self._session() as session:
            session.add(row)
            session.flush()
            return self._load_expense(session, row.id)

    def conditional_update_expense_status(
        self,
        expense_id: int,
        expected_status: ExpenseStatus,
        decision: StatusDecision,
    ) -> Optional[Expense]:
        statement = (
            update(ExpenseRow)
            .where(ExpenseRow.id == expense_id, ExpenseRow.status == expected_status)
            .values(
                status=decision.status,
                approved_by=decision.approved_by,
                approved_at=decision.approved_at,
                rejection_reason=decision.rejection_reason,
            )
            .execution_options(synchronize_session=False)
        )
        with self._session() as session:
            result = session.execute(statement)
            if result.rowcount == 0:
                return None
            return self._load_expense(session, expense_id)

    def query_expenses(
        self,
        query: ExpenseQuery,
        order: ExpenseOrder = ExpenseOrder.NEWEST_FIRST,
    ) -> List[Expense]:
        statement = self._select_with_owner()

        if query.user_id is not None:
            statement = statement.where(ExpenseRow.user_id == query.user_id)
        if query.category is not None:
            statement = statement.where(ExpenseRow.category == query.category)
        if query.status is not None:
            statement = statement.where(ExpenseRow.status == query.status)
        if query.start_date is not None:
            statement = statement.where(ExpenseRow.expense_date >= query.start_date)
        if query.end_date is not None:
            statement = statement.where(ExpenseRow.expense_date <= query.end_date)

        if order == ExpenseOrder.OLDEST_FIRST:
            statement = statement.order_by(ExpenseRow.created_at.asc(), ExpenseRow.id.asc())
        else:
            statement = statement.order_by(ExpenseRow.created_at.desc(), ExpenseRow.id.desc())

        with self._session() as session:
            rows = session.execute(statement).all()
            return [_row_to_expense(expense_row, owner_row) for expense_row, owner_row in rows]
