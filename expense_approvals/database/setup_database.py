"""
Database Setup Script
Creates all tables and seeds demo users and expenses
"""

from datetime import date
from decimal import Decimal

from expense_approvals.config.database import create_tables as create_all_tables
from expense_approvals.container import Container, build_container
from expense_approvals.domain.entities import Caller
from expense_approvals.models.expense import ExpenseCategory, ExpenseStatus
from expense_approvals.models.user import UserRole
from expense_approvals.utils.logger import setup_logger

logger = setup_logger()

ADMIN = ("admin@example.com", "admin123", "Admin", "User", UserRole.ADMIN)
EMPLOYEES = [
    ("john.doe@example.com", "employee123", "John", "Doe", UserRole.EMPLOYEE),
    ("jane.smith@example.com", "employee123", "Jane", "Smith", UserRole.EMPLOYEE),
]

# (employee index, amount, category, description, date, decision, rejection reason)
SAMPLE_EXPENSES = [
    (0, "150.50", ExpenseCategory.TRAVEL, "Flight tickets to client meeting", date(2025, 10, 15), ExpenseStatus.APPROVED, None),
    (0, "45.00", ExpenseCategory.FOOD, "Team lunch with client", date(2025, 10, 20), None, None),
    (0, "299.99", ExpenseCategory.SOFTWARE, "Annual license for development tool", date(2025, 10, 22), ExpenseStatus.APPROVED, None),
    (0, "75.00", ExpenseCategory.OFFICE_SUPPLIES, "Ergonomic keyboard and mouse", date(2025, 10, 25), None, None),
    (1, "200.00", ExpenseCategory.TRAVEL, "Hotel accommodation for conference", date(2025, 10, 18), ExpenseStatus.APPROVED, None),
    (1, "89.99", ExpenseCategory.EQUIPMENT, "Wireless headset for calls", date(2025, 10, 21), ExpenseStatus.REJECTED, "Please use company-approved vendors"),
    (1, "120.00", ExpenseCategory.MARKETING, "Social media advertising campaign", date(2025, 10, 23), None, None),
    (1, "35.50", ExpenseCategory.UTILITIES, "Internet bill for home office", date(2025, 10, 26), None, None),
]


def create_tables():
    """Create all database tables"""
    print("Creating database tables...")
    create_all_tables()
    print("✓ Database tables created successfully")


def _caller(result) -> Caller:
    user = result.user
    return Caller(
        id=user.id,
        email=user.email,
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
    )


def seed(container: Container) -> bool:
    """
    Seed demo data through the services

    Returns:
        bool: False if users already existed and nothing was written
    """
    if container.store.list_identities():
        print("✓ Users already exist, skipping...")
        return False

    print("\nCreating initial users...")
    admin = _caller(container.auth_service.register(*ADMIN))
    employees = [_caller(container.auth_service.register(*fields)) for fields in EMPLOYEES]
    print(f"✓ Created {1 + len(employees)} users")

    print("\nCreating sample expenses...")
    for owner_index, amount, category, description, expense_date, decision, reason in SAMPLE_EXPENSES:
        expense = container.expense_service.create(employees[owner_index], {
            "amount": Decimal(amount),
            "category": category,
            "description": description,
            "expense_date": expense_date,
        })
        if decision is not None:
            container.expense_service.transition(expense.id, admin, decision, reason)
    print(f"✓ Created {len(SAMPLE_EXPENSES)} expenses")

    logger.info("Demo data seeded")
    return True


def main():
    """Run complete database setup"""
    print("=" * 60)
    print("EXPENSE APPROVALS - DATABASE SETUP")
    print("=" * 60)

    create_tables()
    if seed(build_container()):
        print("\nTest credentials:")
        print(f"   Admin: {ADMIN[0]} / {ADMIN[1]}")
        for fields in EMPLOYEES:
            print(f"   Employee: {fields[0]} / {fields[1]}")


if __name__ == "__main__":
    main()
