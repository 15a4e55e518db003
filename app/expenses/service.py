from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.categories.service import CategoryCatalog
from app.utils.dates import format_group_title, local_now, month_bounds

from . import models, schemas


# =========================
# Create Expense
# =========================
def create_expense(
    db: Session,
    amount: float,
    description: str,
    category: str,
    date: Optional[datetime],
    user_id: Optional[int],
):
    new_expense = models.Expense(
        amount=amount,
        description=description,
        category=category,
        date=date or local_now(),
        user_id=user_id,
    )
    db.add(new_expense)
    db.commit()
    db.refresh(new_expense)
    return new_expense


# =========================
# Get Expense by ID
# =========================
def get_expense(db: Session, expense_id: int):
    return (
        db.query(models.Expense)
        .filter(models.Expense.id == expense_id)
        .first()
    )


# =========================
# List Expenses
# =========================
def list_expenses(db: Session, limit: int, offset: int = 0) -> List[models.Expense]:
    return (
        db.query(models.Expense)
        .order_by(models.Expense.date.desc(), models.Expense.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def count_expenses(db: Session) -> int:
    return db.query(func.count(models.Expense.id)).scalar() or 0


# =========================
# Update Expense
# =========================
def update_expense(db: Session, expense: models.Expense):
    """Full replace of an existing row. Missing ids are left alone."""
    db.query(models.Expense).filter(models.Expense.id == expense.id).update(
        {
            models.Expense.amount: expense.amount,
            models.Expense.description: expense.description,
            models.Expense.category: expense.category,
            models.Expense.date: expense.date,
        },
        synchronize_session=False,
    )
    db.commit()


# =========================
# Delete Expense
# =========================
def delete_expense(db: Session, expense_id: int):
    db.query(models.Expense).filter(models.Expense.id == expense_id).delete(
        synchronize_session=False
    )
    db.commit()


# =========================
# Dashboard total
# =========================
def get_current_month_total(db: Session) -> float:
    now = local_now()
    start, end = month_bounds(now.year, now.month)
    total = (
        db.query(func.sum(models.Expense.amount))
        .filter(
            models.Expense.date >= start,
            models.Expense.date < end
        )
        .scalar()
    )
    return total or 0.0


# =========================
# Day totals
# =========================
def get_day_totals(db: Session, days: Iterable[date]) -> Dict[date, float]:
    """Whole-day sums for the given days, whatever page their rows fall on."""
    days = sorted(set(days))
    if not days:
        return {}

    day_col = func.date(models.Expense.date)
    rows = (
        db.query(
            day_col.label("day"),
            func.sum(models.Expense.amount).label("total")
        )
        .filter(
            models.Expense.date >= datetime.combine(days[0], time.min),
            models.Expense.date < datetime.combine(days[-1] + timedelta(days=1), time.min)
        )
        .group_by(day_col)
        .all()
    )

    wanted = set(days)
    totals = {}
    for row in rows:
        # SQLite hands back text, PostgreSQL a date
        day = row.day if isinstance(row.day, date) else date.fromisoformat(str(row.day)[:10])
        if day in wanted:
            totals[day] = row.total or 0.0
    return totals


# =========================
# Helper: group by day
# =========================
def group_by_day(
    expenses: List[models.Expense],
    catalog: CategoryCatalog,
    day_totals: Optional[Dict[date, float]] = None,
    continued_day: Optional[date] = None,
) -> List[schemas.ExpenseGroup]:
    """
    Bucket rows (already newest first) into day groups.

    day_totals overrides the per-page sums so a day split across pages
    shows its full total. A first group on continued_day is flagged so the
    page does not repeat its header.
    """
    today = local_now().date()
    groups = {}

    for exp in expenses:
        day = exp.date.date()
        if day not in groups:
            groups[day] = schemas.ExpenseGroup(
                title=format_group_title(day, today),
                day=day,
            )
        group = groups[day]
        group.total += exp.amount
        group.items.append(
            schemas.ExpenseItem(
                id=exp.id,
                amount=exp.amount,
                description=exp.description,
                category=exp.category,
                date=exp.date,
                user_id=exp.user_id,
                time=exp.date.strftime("%H:%M"),
                style=catalog.style_for(exp.category),
            )
        )

    ordered = sorted(groups.values(), key=lambda g: g.day, reverse=True)
    for group in ordered:
        if day_totals and group.day in day_totals:
            group.total = day_totals[group.day]
    if ordered and continued_day is not None and ordered[0].day == continued_day:
        ordered[0].continued = True
    return ordered
