import json
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response
from loguru import logger
from sqlalchemy.orm import Session

from app.categories.service import CategoryCatalog, get_categories
from app.config import settings
from app.database import get_db
from app.templating import is_htmx, render
from app.users.auth import get_current_user
from app.users.schemas import UserDisplaySchema
from app.utils.dates import format_form_datetime

from . import models, schemas, service

router = APIRouter()

HX_LOCATION = json.dumps({"path": "/expenses", "target": "#content"}, separators=(", ", ":"))


def parse_offset(raw: Optional[str]) -> int:
    try:
        offset = int(raw) if raw is not None else 0
    except ValueError:
        return 0
    return max(offset, 0)


def _redirect_to_list() -> Response:
    return Response(status_code=200, headers={"HX-Location": HX_LOCATION})


@router.get("")
def list_expenses(
    request: Request,
    offset: Optional[str] = None,
    db: Session = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_categories),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    page_size = settings.PAGE_SIZE
    start = parse_offset(offset)

    # one extra row tells us whether another page exists; a later page also
    # reads the row before it to see whether its first day is a continuation
    fragment = start > 0 and is_htmx(request)
    lead = 1 if fragment else 0
    rows = service.list_expenses(db, limit=page_size + 1 + lead, offset=start - lead)
    previous_day = rows[0].date.date() if lead and rows else None
    rows = rows[lead:]
    has_more = len(rows) > page_size
    rows = rows[:page_size]

    day_totals = service.get_day_totals(db, [row.date.date() for row in rows])
    context = {
        "groups": service.group_by_day(
            rows, catalog, day_totals=day_totals, continued_day=previous_day
        ),
        "has_more": has_more,
        "next_offset": start + page_size,
        "user": current_user,
    }

    if fragment:
        return render(request, "expense_rows.html", context)

    context["total"] = service.get_current_month_total(db)
    return render(request, "list.html", context)


@router.get("/create")
def create_expense_form(
    request: Request,
    catalog: CategoryCatalog = Depends(get_categories),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    return render(request, "form.html", {
        "is_edit": False,
        "expense": None,
        "formatted_date": "",
        "categories": list(catalog),
        "user": current_user,
    })


@router.post("")
def create_expense(
    amount: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    form = schemas.ExpenseForm.from_form(amount, description, category, date)
    expense = service.create_expense(
        db,
        form.amount,
        form.description,
        form.category,
        form.date,
        user_id=current_user.id,
    )
    logger.info(f"Expense {expense.id} created by {current_user.username}")
    return _redirect_to_list()


@router.get("/{expense_id}/edit")
def edit_expense_form(
    expense_id: int,
    request: Request,
    db: Session = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_categories),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    expense = service.get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    return render(request, "form.html", {
        "is_edit": True,
        "expense": expense,
        "formatted_date": format_form_datetime(expense.date),
        "categories": list(catalog),
        "user": current_user,
    })


@router.post("/{expense_id}")
def update_expense(
    expense_id: int,
    amount: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    form = schemas.ExpenseForm.from_form(amount, description, category, date)
    service.update_expense(db, models.Expense(
        id=expense_id,
        amount=form.amount,
        description=form.description,
        category=form.category,
        date=form.date,
    ))
    logger.info(f"Expense {expense_id} updated by {current_user.username}")
    return _redirect_to_list()


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    service.delete_expense(db, expense_id)
    logger.info(f"Expense {expense_id} deleted by {current_user.username}")
    return _redirect_to_list()
