from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Iterable, List, Optional
from datetime import date, datetime
from decimal import Decimal
import logging

from app.models.budget import Budget
from app.models.category import Category, CategoryTypeEnum
from app.models.transaction import Transaction, TransactionTypeEnum
from app.schemas.budget import BudgetCreate, BudgetProgress, BudgetStatus, BudgetSummary
from app.core.exceptions import NotFoundError, BusinessLogicError, DuplicateBudgetError
from app.utils import decimal_utils as dec
from app.utils.dates import first_day_of_month, month_bounds, current_month

logger = logging.getLogger(__name__)

# Status tier thresholds (percent of the monthly limit); a boundary belongs to the higher tier
YELLOW_THRESHOLD = Decimal("70")
RED_THRESHOLD = Decimal("90")


def budget_status(percentage: Decimal) -> BudgetStatus:
    """green below 70%, yellow from 70% up to 90%, red from 90%"""
    if percentage < YELLOW_THRESHOLD:
        return BudgetStatus.GREEN
    if percentage < RED_THRESHOLD:
        return BudgetStatus.YELLOW
    return BudgetStatus.RED


def build_progress(budget: Budget, category_name: str, amounts: Iterable) -> BudgetProgress:
    """Derive spending, remaining, percentage and tier from the month's expense amounts"""
    limit = dec.to_decimal(budget.amount)
    spending = dec.sum_decimals(amounts)
    raw_percentage = dec.percentage(spending, limit)
    percentage = dec.round_decimal(raw_percentage, 1)

    return BudgetProgress(
        budget_id=budget.id,
        category_id=budget.category_id,
        category_name=category_name,
        budget_amount=limit,
        spending=spending,
        remaining=dec.subtract(limit, spending),
        percentage=percentage,
        # Tier comes from the exact ratio; only the reported number is rounded
        status=budget_status(raw_percentage),
        month=budget.month,
    )


class BudgetService:
    def __init__(self, db: Session):
        self.db = db

    # --- Queries consumed by the progress calculator and the alert evaluator ---

    def find_expense_transactions(
        self, user_id, category_id, start: datetime, end: datetime
    ) -> List[Transaction]:
        """EXPENSE transactions of one category dated within [start, end)"""
        return self.db.query(Transaction).filter(
            Transaction.user_id == user_id,
            Transaction.category_id == category_id,
            Transaction.type == TransactionTypeEnum.EXPENSE,
            Transaction.date >= start,
            Transaction.date < end
        ).all()

    def find_budget(self, user_id, category_id, month: date) -> Optional[Budget]:
        """Budget for (user, category) covering the month that contains `month`"""
        month_start = first_day_of_month(month)
        return self.db.query(Budget).filter(
            Budget.user_id == user_id,
            Budget.category_id == category_id,
            Budget.month == month_start
        ).first()

    def get_budget(self, budget_id, user_id) -> Optional[Budget]:
        return self.db.query(Budget).filter(
            Budget.id == budget_id,
            Budget.user_id == user_id
        ).first()

    def list_budgets(self, user_id, month: Optional[date] = None) -> List[Budget]:
        query = self.db.query(Budget).filter(Budget.user_id == user_id)
        if month is not None:
            query = query.filter(Budget.month == first_day_of_month(month))
        return query.order_by(Budget.created_at.desc()).all()

    # --- Budget CRUD ---

    def create_budget(self, user_id, budget_create: BudgetCreate) -> Budget:
        category = self.db.query(Category).filter(
            Category.id == budget_create.category_id,
            or_(Category.user_id == user_id, Category.is_predefined == True)
        ).first()
        if not category:
            raise NotFoundError("Category not found")

        # Budgets only make sense for spending
        if category.type != CategoryTypeEnum.EXPENSE:
            raise BusinessLogicError("Budgets can only be created for expense categories")

        month_start = first_day_of_month(budget_create.month)
        if self.find_budget(user_id, category.id, month_start):
            raise DuplicateBudgetError(category.name, month_start)

        budget = Budget(
            user_id=user_id,
            category_id=category.id,
            amount=budget_create.amount,
            month=month_start,
        )
        self.db.add(budget)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateBudgetError(category.name, month_start)
        self.db.refresh(budget)

        logger.info(f"Created budget {budget.id}: {category.name} {month_start:%Y-%m} limit {budget.amount}")
        return budget

    def update_budget(self, budget_id, user_id, amount: Decimal) -> Budget:
        budget = self.get_budget(budget_id, user_id)
        if not budget:
            raise NotFoundError("Budget not found")

        budget.amount = amount
        self.db.commit()
        self.db.refresh(budget)
        return budget

    def delete_budget(self, budget_id, user_id) -> None:
        budget = self.get_budget(budget_id, user_id)
        if not budget:
            raise NotFoundError("Budget not found")

        self.db.delete(budget)
        self.db.commit()

    # --- Progress ---

    def progress_for(self, budget: Budget) -> BudgetProgress:
        start, end = month_bounds(budget.month)
        transactions = self.find_expense_transactions(budget.user_id, budget.category_id, start, end)
        category_name = budget.category.name if budget.category else ""
        return build_progress(budget, category_name, (tx.amount for tx in transactions))

    def calculate_budget_progress(self, budget_id, user_id) -> Optional[BudgetProgress]:
        """
        Current progress of one budget, recomputed from the transactions on every call.

        Returns None when the budget does not exist for this user.
        """
        budget = self.get_budget(budget_id, user_id)
        if not budget:
            return None
        return self.progress_for(budget)

    def calculate_all_budget_progress(self, user_id, month: Optional[date] = None) -> List[BudgetProgress]:
        """Progress of every budget the user has for a month (current month by default)"""
        target = first_day_of_month(month) if month else current_month()
        return [self.progress_for(budget) for budget in self.list_budgets(user_id, target)]

    def get_budget_summary(self, user_id, month: Optional[date] = None) -> BudgetSummary:
        target = first_day_of_month(month) if month else current_month()
        progress_list = self.calculate_all_budget_progress(user_id, target)

        total_budget = dec.sum_decimals(p.budget_amount for p in progress_list)
        total_spending = dec.sum_decimals(p.spending for p in progress_list)
        total_remaining = dec.sum_decimals(p.remaining for p in progress_list)

        return BudgetSummary(
            month=target,
            total_budget=total_budget,
            total_spending=total_spending,
            total_remaining=total_remaining,
            overall_percentage=dec.round_decimal(dec.percentage(total_spending, total_budget), 1),
            budgets_at_risk=sum(1 for p in progress_list if p.status == BudgetStatus.RED),
            budgets_warning=sum(1 for p in progress_list if p.status == BudgetStatus.YELLOW),
            budgets_healthy=sum(1 for p in progress_list if p.status == BudgetStatus.GREEN),
            total_budgets=len(progress_list),
        )
