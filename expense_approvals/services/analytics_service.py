"""
Analytics Service
Read-only aggregates over the caller's visible expenses
"""

from decimal import Decimal
from typing import Iterable

from expense_approvals.domain.entities import AnalyticsSummary, Caller, Expense, ExpenseQuery
from expense_approvals.models.expense import ExpenseStatus
from expense_approvals.repositories.interface import ExpenseStore
from expense_approvals.services.access_control import Operation, visible_owner_scope


def summarize(expenses: Iterable[Expense]) -> AnalyticsSummary:
    """
    Fold expenses into counts and Decimal totals

    Category and status totals only get keys for values that occur;
    status_counts always has pending, approved and rejected.
    """
    summary = AnalyticsSummary(
        status_counts={status.value: 0 for status in ExpenseStatus},
    )

    for expense in expenses:
        category = expense.category.value
        status = expense.status.value

        summary.total_expenses += 1
        summary.total_amount += expense.amount
        summary.category_totals[category] = summary.category_totals.get(category, Decimal("0.00")) + expense.amount
        summary.status_totals[status] = summary.status_totals.get(status, Decimal("0.00")) + expense.amount
        summary.status_counts[status] += 1

    return summary


class AnalyticsService:
    """Aggregates for dashboards"""

    def __init__(self, store: ExpenseStore):
        self.store = store

    def analytics(self, caller: Caller) -> AnalyticsSummary:
        """Same visibility as an unfiltered expense listing"""
        owner_scope = visible_owner_scope(caller, Operation.VIEW_ANALYTICS)
        return summarize(self.store.query_expenses(ExpenseQuery(user_id=owner_scope)))
