from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import uuid

from app.core.deps import get_current_active_user, get_budget_service
from app.core.exceptions import NotFoundError, ConflictError, BusinessLogicError
from app.models.user import User
from app.schemas.budget import (
    BudgetCreate,
    BudgetUpdate,
    Budget as BudgetSchema,
    BudgetProgress,
    BudgetSummary,
)
from app.services.budget_service import BudgetService
from app.utils.dates import parse_month

router = APIRouter()


def _month_param(month: Optional[str]):
    if month is None:
        return None
    try:
        return parse_month(month)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid month, expected YYYY-MM"
        )


@router.get("/", response_model=List[BudgetProgress])
async def get_budgets(
    month: Optional[str] = Query(None, description="Month as YYYY-MM, defaults to the current month"),
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    """Get budgets of a month together with their current spending"""
    return budgets.calculate_all_budget_progress(current_user.id, _month_param(month))

@router.post("/", response_model=BudgetSchema, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_create: BudgetCreate,
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    """Create a new budget"""
    try:
        return budgets.create_budget(current_user.id, budget_create)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BusinessLogicError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.get("/summary", response_model=BudgetSummary)
async def get_budget_summary(
    month: Optional[str] = Query(None, description="Month as YYYY-MM, defaults to the current month"),
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    """Totals and health counts across all budgets of a month"""
    return budgets.get_budget_summary(current_user.id, _month_param(month))

@router.get("/{budget_id}", response_model=BudgetSchema)
async def get_budget(
    budget_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    """Get a specific budget"""
    budget = budgets.get_budget(budget_id, current_user.id)
    if not budget:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Budget not found"
        )
    return budget

@router.get("/{budget_id}/progress", response_model=BudgetProgress)
async def get_budget_progress(
    budget_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    progress = budgets.calculate_budget_progress(budget_id, current_user.id)
    if not progress:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Budget not found"
        )
    return progress

@router.put("/{budget_id}", response_model=BudgetProgress)
async def update_budget(
    budget_id: uuid.UUID,
    budget_update: BudgetUpdate,
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    """Update the monthly limit of a budget and return its recalculated progress"""
    try:
        budget = budgets.update_budget(budget_id, current_user.id, budget_update.amount)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return budgets.progress_for(budget)

@router.delete("/{budget_id}")
async def delete_budget(
    budget_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    budgets: BudgetService = Depends(get_budget_service)
):
    """Delete a budget"""
    try:
        budgets.delete_budget(budget_id, current_user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"message": "Budget deleted successfully"}
