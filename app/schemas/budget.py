from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
import uuid

from app.utils.dates import first_day_of_month

MAX_BUDGET_AMOUNT = Decimal("1000000")


class BudgetStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class BudgetBase(BaseModel):
    category_id: uuid.UUID
    amount: Decimal = Field(..., gt=0, le=MAX_BUDGET_AMOUNT, decimal_places=2)
    month: date  # Normalized to the first day of the month

    @validator("month")
    def normalize_month(cls, v):
        return first_day_of_month(v)

class BudgetCreate(BudgetBase):
    pass

class BudgetUpdate(BaseModel):
    # Category and month are fixed once the budget exists
    amount: Decimal = Field(..., gt=0, le=MAX_BUDGET_AMOUNT, decimal_places=2)

class Budget(BudgetBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BudgetProgress(BaseModel):
    budget_id: uuid.UUID
    category_id: uuid.UUID
    category_name: str
    budget_amount: Decimal
    spending: Decimal
    remaining: Decimal  # Negative when overspent
    percentage: Decimal  # Rounded to 1 decimal place
    status: BudgetStatus
    month: date

class BudgetSummary(BaseModel):
    month: date
    total_budget: Decimal
    total_spending: Decimal
    total_remaining: Decimal
    overall_percentage: Decimal
    budgets_at_risk: int
    budgets_warning: int
    budgets_healthy: int
    total_budgets: int
