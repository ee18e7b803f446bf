from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal
from enum import Enum


class ChartType(str, Enum):
    PIE = "pie"
    BAR = "bar"
    LINE = "line"


class TotalsSummary(BaseModel):
    total_expenses: Decimal
    total_income: Decimal
    net_balance: Decimal  # Income minus expenses, negative when spending more than earned
    expense_count: int
    income_count: int
    total_transactions: int
    start_date: date
    end_date: date  # Inclusive


class TopCategory(BaseModel):
    name: str
    amount: Decimal
    count: int
    percentage: Decimal  # Share of total expenses, 1 decimal place


class DashboardSummary(BaseModel):
    summary: TotalsSummary
    top_categories: List[TopCategory]


class PieSlice(BaseModel):
    name: str
    value: Decimal
    percentage: Decimal


class CategoryBar(BaseModel):
    category: str
    expense: Decimal
    income: Decimal


class DailyPoint(BaseModel):
    date: date
    expense: Decimal
    income: Decimal
    net: Decimal


class ChartData(BaseModel):
    pie_chart: Optional[List[PieSlice]] = None
    bar_chart: Optional[List[CategoryBar]] = None
    line_chart: Optional[List[DailyPoint]] = None
