from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Tuple
from datetime import date, datetime, time, timedelta
from decimal import Decimal
import logging

from app.core.exceptions import ValidationError
from app.models.transaction import Transaction, TransactionTypeEnum
from app.schemas.dashboard import (
    CategoryBar,
    ChartData,
    ChartType,
    DailyPoint,
    DashboardSummary,
    PieSlice,
    TopCategory,
    TotalsSummary,
)
from app.utils import decimal_utils as dec
from app.utils.dates import current_month, last_day_of_month

logger = logging.getLogger(__name__)

TOP_CATEGORY_LIMIT = 5
# Longest range a line chart is drawn for, one point per day
MAX_RANGE_DAYS = 366


def resolve_range(start_date: Optional[date], end_date: Optional[date]) -> Tuple[date, date]:
    """
    Inclusive [start_date, end_date] defaulting to the current month.

    A missing end date means the end of the start date's month.
    """
    start = start_date or current_month()
    end = end_date or last_day_of_month(start)
    if end < start:
        raise ValidationError("end_date must not be before start_date", error_code="INVALID_DATE_RANGE")
    if (end - start).days >= MAX_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days", error_code="INVALID_DATE_RANGE")
    return start, end


def _share(part: Decimal, total: Decimal) -> Decimal:
    return dec.round_decimal(dec.percentage(part, total), 1)


class DashboardService:
    """Income/expense totals and chart series over a date range"""

    def __init__(self, db: Session):
        self.db = db

    def find_transactions(self, user_id, start: date, end: date) -> List[Transaction]:
        # Dates are whole days; the range ends before midnight after end
        return self.db.query(Transaction).filter(
            Transaction.user_id == user_id,
            Transaction.date >= datetime.combine(start, time.min),
            Transaction.date < datetime.combine(end + timedelta(days=1), time.min)
        ).order_by(Transaction.date.asc()).all()

    def get_summary(self, user_id, start_date: Optional[date] = None, end_date: Optional[date] = None) -> DashboardSummary:
        start, end = resolve_range(start_date, end_date)
        transactions = self.find_transactions(user_id, start, end)

        expenses = [tx for tx in transactions if tx.type == TransactionTypeEnum.EXPENSE]
        incomes = [tx for tx in transactions if tx.type == TransactionTypeEnum.INCOME]
        total_expenses = dec.sum_decimals(tx.amount for tx in expenses)
        total_income = dec.sum_decimals(tx.amount for tx in incomes)

        by_category: Dict[str, List[Decimal]] = {}
        for tx in expenses:
            by_category.setdefault(tx.category, []).append(dec.to_decimal(tx.amount))

        ranked = sorted(
            ((name, dec.sum_decimals(amounts), len(amounts)) for name, amounts in by_category.items()),
            key=lambda item: item[1],
            reverse=True,
        )
        top_categories = [
            TopCategory(name=name, amount=amount, count=count, percentage=_share(amount, total_expenses))
            for name, amount, count in ranked[:TOP_CATEGORY_LIMIT]
        ]

        return DashboardSummary(
            summary=TotalsSummary(
                total_expenses=total_expenses,
                total_income=total_income,
                net_balance=dec.subtract(total_income, total_expenses),
                expense_count=len(expenses),
                income_count=len(incomes),
                total_transactions=len(transactions),
                start_date=start,
                end_date=end,
            ),
            top_categories=top_categories,
        )

    def get_chart_data(
        self,
        user_id,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        chart_type: Optional[ChartType] = None,
    ) -> ChartData:
        """All three series, or only the one asked for"""
        start, end = resolve_range(start_date, end_date)
        transactions = self.find_transactions(user_id, start, end)

        data = ChartData()
        if chart_type in (None, ChartType.PIE):
            data.pie_chart = self.pie_chart(transactions)
        if chart_type in (None, ChartType.BAR):
            data.bar_chart = self.bar_chart(transactions)
        if chart_type in (None, ChartType.LINE):
            data.line_chart = self.line_chart(transactions, start, end)
        return data

    @staticmethod
    def pie_chart(transactions: List[Transaction]) -> List[PieSlice]:
        """Expense breakdown by category, largest first"""
        totals: Dict[str, Decimal] = {}
        for tx in transactions:
            if tx.type == TransactionTypeEnum.EXPENSE:
                totals[tx.category] = dec.add(totals.get(tx.category, dec.ZERO), tx.amount)

        total_expenses = dec.sum_decimals(totals.values())
        slices = [
            PieSlice(name=name, value=value, percentage=_share(value, total_expenses))
            for name, value in totals.items()
        ]
        return sorted(slices, key=lambda s: s.value, reverse=True)

    @staticmethod
    def bar_chart(transactions: List[Transaction]) -> List[CategoryBar]:
        """Expense and income side by side per category, ordered by expense"""
        bars: Dict[str, CategoryBar] = {}
        for tx in transactions:
            bar = bars.setdefault(tx.category, CategoryBar(category=tx.category, expense=dec.ZERO, income=dec.ZERO))
            if tx.type == TransactionTypeEnum.EXPENSE:
                bar.expense = dec.add(bar.expense, tx.amount)
            else:
                bar.income = dec.add(bar.income, tx.amount)
        return sorted(bars.values(), key=lambda b: b.expense, reverse=True)

    @staticmethod
    def line_chart(transactions: List[Transaction], start: date, end: date) -> List[DailyPoint]:
        """One point per day of the range, days without transactions included"""
        days: Dict[date, Dict[str, Decimal]] = {}
        day = start
        while day <= end:
            days[day] = {"expense": dec.ZERO, "income": dec.ZERO}
            day += timedelta(days=1)

        for tx in transactions:
            totals = days.get(tx.date.date())
            if totals is None:
                continue
            key = "expense" if tx.type == TransactionTypeEnum.EXPENSE else "income"
            totals[key] = dec.add(totals[key], tx.amount)

        return [
            DailyPoint(
                date=day,
                expense=totals["expense"],
                income=totals["income"],
                net=dec.subtract(totals["income"], totals["expense"]),
            )
            for day, totals in days.items()
        ]
