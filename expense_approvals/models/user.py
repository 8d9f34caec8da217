"""
User Model
Stores registered identities and their role
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from datetime import datetime
import enum

from expense_approvals.config.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    EMPLOYEE = "employee"
    ADMIN = "admin"


class User(Base):
    """User table"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    role = Column(
        Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.EMPLOYEE,
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
