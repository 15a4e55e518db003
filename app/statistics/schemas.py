from typing import List

from pydantic import BaseModel

from app.categories.schemas import CategoryStyle
from app.expenses.schemas import ExpenseOut


class CategoryTotal(BaseModel):
    category: str
    total: float
    count: int


class MonthTotal(BaseModel):
    month: int
    total: float


class DayTotal(BaseModel):
    day: int
    total: float


class CategoryBreakdown(CategoryTotal):
    percentage: float
    style: CategoryStyle


class SeriesPoint(BaseModel):
    label: str
    total: float
    # bar height relative to the busiest point, 0-100
    height: float


class PeriodLink(BaseModel):
    year: int
    month: int
    label: str
    query: str


class StatisticsReport(BaseModel):
    year: int
    month: int
    label: str
    total: float
    count: int
    categories: List[CategoryBreakdown]
    series: List[SeriesPoint]
    expenses: List[ExpenseOut]
    previous: PeriodLink
    next: PeriodLink
