"""
Period aggregation for the statistics page.

A period is a (year, month) pair; month 0 means the whole year. Callers
validate the month before it reaches this module.
"""
import calendar
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from app.categories.service import CategoryCatalog
from app.expenses.models import Expense
from app.expenses.schemas import ExpenseOut
from app.utils.dates import days_in_month, month_bounds, year_bounds

from . import schemas

WHOLE_YEAR = 0


def period_range(year: int, month: int) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range covering the period."""
    if month == WHOLE_YEAR:
        return year_bounds(year)
    return month_bounds(year, month)


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return 100.0 * part / whole


# -------------------------
# Expenses
# -------------------------
def _expenses_between(db: Session, start: datetime, end: datetime) -> List[Expense]:
    return (
        db.query(Expense)
        .filter(
            Expense.date >= start,
            Expense.date < end
        )
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )


def get_expenses_by_month(db: Session, year: int, month: int) -> List[Expense]:
    return _expenses_between(db, *month_bounds(year, month))


def get_expenses_by_year(db: Session, year: int) -> List[Expense]:
    return _expenses_between(db, *year_bounds(year))


def get_expenses_for_period(db: Session, year: int, month: int) -> List[Expense]:
    return _expenses_between(db, *period_range(year, month))


# -------------------------
# Category totals
# -------------------------
def _category_totals_between(
    db: Session, start: datetime, end: datetime
) -> List[schemas.CategoryTotal]:
    total_col = func.sum(Expense.amount).label("total")
    rows = (
        db.query(
            Expense.category.label("category"),
            total_col,
            func.count(Expense.id).label("count")
        )
        .filter(
            Expense.date >= start,
            Expense.date < end
        )
        .group_by(Expense.category)
        # ties fall back to alphabetical order
        .order_by(total_col.desc(), Expense.category.asc())
        .all()
    )
    return [
        schemas.CategoryTotal(category=row.category, total=row.total or 0.0, count=row.count)
        for row in rows
    ]


def get_category_totals_by_month(db: Session, year: int, month: int):
    return _category_totals_between(db, *month_bounds(year, month))


def get_category_totals_by_year(db: Session, year: int):
    return _category_totals_between(db, *year_bounds(year))


def get_category_totals_for_period(db: Session, year: int, month: int):
    return _category_totals_between(db, *period_range(year, month))


# -------------------------
# Time series
# -------------------------
def get_monthly_totals_for_year(db: Session, year: int) -> List[schemas.MonthTotal]:
    """Months without expenses are absent from the result."""
    start, end = year_bounds(year)
    month_col = extract("month", Expense.date)
    rows = (
        db.query(
            month_col.label("month"),
            func.sum(Expense.amount).label("total")
        )
        .filter(
            Expense.date >= start,
            Expense.date < end
        )
        .group_by(month_col)
        .order_by(month_col)
        .all()
    )
    return [schemas.MonthTotal(month=int(row.month), total=row.total or 0.0) for row in rows]


def get_daily_totals_for_month(db: Session, year: int, month: int) -> List[schemas.DayTotal]:
    """Days without expenses are absent from the result."""
    start, end = month_bounds(year, month)
    day_col = extract("day", Expense.date)
    rows = (
        db.query(
            day_col.label("day"),
            func.sum(Expense.amount).label("total")
        )
        .filter(
            Expense.date >= start,
            Expense.date < end
        )
        .group_by(day_col)
        .order_by(day_col)
        .all()
    )
    return [schemas.DayTotal(day=int(row.day), total=row.total or 0.0) for row in rows]


def get_total_for_period(db: Session, year: int, month: int) -> float:
    start, end = period_range(year, month)
    total = (
        db.query(func.sum(Expense.amount))
        .filter(
            Expense.date >= start,
            Expense.date < end
        )
        .scalar()
    )
    return total or 0.0


# -------------------------
# Report
# -------------------------
def period_label(year: int, month: int) -> str:
    if month == WHOLE_YEAR:
        return str(year)
    return f"{calendar.month_name[month]} {year}"


def _period_link(year: int, month: int) -> schemas.PeriodLink:
    if month == WHOLE_YEAR:
        query = f"year={year}&period=year"
    else:
        query = f"year={year}&month={month}"
    return schemas.PeriodLink(year=year, month=month, label=period_label(year, month), query=query)


def adjacent_periods(year: int, month: int) -> Tuple[schemas.PeriodLink, schemas.PeriodLink]:
    if month == WHOLE_YEAR:
        return _period_link(year - 1, WHOLE_YEAR), _period_link(year + 1, WHOLE_YEAR)

    prev_year, prev_month = (year - 1, 12) if month == 1 else (year, month - 1)
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    return _period_link(prev_year, prev_month), _period_link(next_year, next_month)


def _build_series(db: Session, year: int, month: int) -> List[schemas.SeriesPoint]:
    # zero-fill the gaps the aggregate queries leave out
    if month == WHOLE_YEAR:
        found = {row.month: row.total for row in get_monthly_totals_for_year(db, year)}
        points = [(calendar.month_abbr[m], found.get(m, 0.0)) for m in range(1, 13)]
    else:
        found = {row.day: row.total for row in get_daily_totals_for_month(db, year, month)}
        points = [(str(d), found.get(d, 0.0)) for d in range(1, days_in_month(year, month) + 1)]

    peak = max((total for _, total in points), default=0.0)
    return [
        schemas.SeriesPoint(label=label, total=total, height=percentage(total, peak))
        for label, total in points
    ]


def build_statistics(
    db: Session,
    year: int,
    month: int,
    catalog: CategoryCatalog,
) -> schemas.StatisticsReport:
    total = get_total_for_period(db, year, month)
    category_totals = get_category_totals_for_period(db, year, month)
    expenses = get_expenses_for_period(db, year, month)
    previous, following = adjacent_periods(year, month)

    categories = [
        schemas.CategoryBreakdown(
            category=row.category,
            total=row.total,
            count=row.count,
            percentage=percentage(row.total, total),
            style=catalog.style_for(row.category),
        )
        for row in category_totals
    ]

    return schemas.StatisticsReport(
        year=year,
        month=month,
        label=period_label(year, month),
        total=total,
        count=sum(row.count for row in category_totals),
        categories=categories,
        series=_build_series(db, year, month),
        expenses=[ExpenseOut.model_validate(exp) for exp in expenses],
        previous=previous,
        next=following,
    )
