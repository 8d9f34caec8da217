"""
Analytics Tests
Aggregates over the caller's visible expenses
"""

from datetime import date, datetime
from decimal import Decimal

from expense_approvals.domain.entities import Expense
from expense_approvals.models.expense import ExpenseCategory, ExpenseStatus
from expense_approvals.services.analytics_service import summarize


def _expense(amount, category, status, expense_id=1):
    return Expense(
        id=expense_id,
        user_id=1,
        amount=Decimal(amount),
        category=category,
        description="test",
        expense_date=date(2025, 10, 20),
        status=status,
        created_at=datetime(2025, 10, 20, 12, 0),
    )


class TestSummarize:
    """Test the fold itself"""

    def test_empty(self):
        summary = summarize([])

        assert summary.total_expenses == 0
        assert summary.total_amount == Decimal("0")
        assert summary.category_totals == {}
        assert summary.status_totals == {}
        assert summary.status_counts == {"pending": 0, "approved": 0, "rejected": 0}

    def test_decimal_sums_are_exact(self):
        expenses = [_expense("0.10", ExpenseCategory.FOOD, ExpenseStatus.PENDING, i) for i in range(3)]
        summary = summarize(expenses)

        assert summary.total_amount == Decimal("0.30")
        assert summary.category_totals == {"food": Decimal("0.30")}

    def test_keys_only_for_seen_values(self):
        summary = summarize([_expense("10.00", ExpenseCategory.SOFTWARE, ExpenseStatus.REJECTED)])

        assert summary.category_totals == {"software": Decimal("10.00")}
        assert summary.status_totals == {"rejected": Decimal("10.00")}
        assert summary.status_counts == {"pending": 0, "approved": 0, "rejected": 1}


class TestAnalyticsService:
    """Test visibility of the aggregates"""

    def test_employee_scenario(self, analytics_service, expense_service, admin, employee, other_employee):
        expense_service.create(employee, {
            "amount": "100.00", "category": "food", "description": "Lunch", "expense_date": "2025-10-20",
        })
        travel = expense_service.create(employee, {
            "amount": "200.00", "category": "travel", "description": "Train", "expense_date": "2025-10-21",
        })
        expense_service.transition(travel.id, admin, "approved")
        expense_service.create(other_employee, {
            "amount": "999.00", "category": "equipment", "description": "Laptop", "expense_date": "2025-10-22",
        })

        summary = analytics_service.analytics(employee)

        assert summary.total_expenses == 2
        assert summary.total_amount == Decimal("300")
        assert summary.category_totals == {"food": Decimal("100"), "travel": Decimal("200")}
        assert summary.status_totals == {"pending": Decimal("100"), "approved": Decimal("200")}
        assert summary.status_counts == {"pending": 1, "approved": 1, "rejected": 0}

    def test_admin_sees_everything(self, analytics_service, expense_service, admin, employee, other_employee):
        food = expense_service.create(employee, {
            "amount": "100.00", "category": "food", "description": "Lunch", "expense_date": "2025-10-20",
        })
        expense_service.create(other_employee, {
            "amount": "150.00", "category": "food", "description": "Dinner", "expense_date": "2025-10-20",
        })
        expense_service.transition(food.id, admin, "rejected", "duplicate")

        summary = analytics_service.analytics(admin)

        assert summary.total_expenses == 2
        assert summary.total_amount == Decimal("250.00")
        assert summary.category_totals == {"food": Decimal("250.00")}
        assert summary.status_counts == {"pending": 1, "approved": 0, "rejected": 1}
