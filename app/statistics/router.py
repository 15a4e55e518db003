from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.categories.service import CategoryCatalog, get_categories
from app.database import get_db
from app.templating import render
from app.users.auth import get_current_user
from app.users.schemas import UserDisplaySchema
from app.utils.dates import local_now

from . import service

router = APIRouter()


def resolve_period(
    year: Optional[str],
    month: Optional[str],
    period: Optional[str],
) -> Tuple[int, int]:
    """Turn raw query values into a (year, month) the aggregator accepts."""
    now = local_now()

    try:
        resolved_year = int(year) if year else now.year
    except ValueError:
        resolved_year = now.year
    if not 1 <= resolved_year <= 9998:
        resolved_year = now.year

    if period == "year":
        return resolved_year, service.WHOLE_YEAR

    try:
        resolved_month = int(month) if month else now.month
    except ValueError:
        resolved_month = now.month
    if not 1 <= resolved_month <= 12:
        resolved_month = now.month

    return resolved_year, resolved_month


@router.get("")
def statistics(
    request: Request,
    year: Optional[str] = Query(None, description="Four digit year, defaults to the current year"),
    month: Optional[str] = Query(None, description="1-12, defaults to the current month"),
    period: Optional[str] = Query(None, description="'year' for the whole-year view"),
    db: Session = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_categories),
    current_user: UserDisplaySchema = Depends(get_current_user),
):
    resolved_year, resolved_month = resolve_period(year, month, period)
    report = service.build_statistics(db, resolved_year, resolved_month, catalog)
    return render(request, "statistics.html", {
        "report": report,
        "user": current_user,
    })
