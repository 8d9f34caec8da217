"""
Expense Routes
Submission, listing, pending queue, analytics and status decisions
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from expense_approvals.container import Container
from expense_approvals.domain.entities import Caller
from expense_approvals.routes.deps import get_container, get_current_caller
from expense_approvals.schemas.expense import AnalyticsResponse, ExpenseResponse

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """Submit an expense claim"""
    expense = container.expense_service.create(caller, payload)
    return ExpenseResponse.model_validate(expense)


@router.get("", response_model=List[ExpenseResponse])
def list_expenses(
    category: Optional[str] = Query(None),
    expense_status: Optional[str] = Query(None, alias="status"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """
    List visible expenses, newest first

    Employees only see their own claims; admins see everyone's.
    """
    expenses = container.expense_service.list_visible(caller, {
        "category": category,
        "status": expense_status,
        "start_date": start_date,
        "end_date": end_date,
    })
    return [ExpenseResponse.model_validate(expense) for expense in expenses]


@router.get("/pending", response_model=List[ExpenseResponse])
def list_pending_expenses(
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """Pending queue, oldest first (admin only)"""
    expenses = container.expense_service.list_pending(caller)
    return [ExpenseResponse.model_validate(expense) for expense in expenses]


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """Totals over the caller's visible expenses"""
    return AnalyticsResponse.model_validate(container.analytics_service.analytics(caller))


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """Single expense"""
    return ExpenseResponse.model_validate(container.expense_service.get_one(expense_id, caller))


@router.patch("/{expense_id}/status", response_model=ExpenseResponse)
def update_expense_status(
    expense_id: int,
    payload: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_current_caller),
    container: Container = Depends(get_container),
):
    """Approve or reject a pending expense (admin only)"""
    expense = container.expense_service.transition(
        expense_id,
        caller,
        payload.get("status"),
        payload.get("rejection_reason"),
    )
    return ExpenseResponse.model_validate(expense)
