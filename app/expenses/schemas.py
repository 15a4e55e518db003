import math
from datetime import date, datetime
from typing import List, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict

from app.categories.schemas import CategoryStyle
from app.utils.dates import parse_form_datetime

DEFAULT_DESCRIPTION = "Expense"


# =========================
# Form input
# =========================
class ExpenseForm(BaseModel):
    amount: float
    description: str
    category: str
    date: datetime

    @classmethod
    def from_form(
        cls,
        amount: Optional[str],
        description: Optional[str],
        category: Optional[str],
        date_value: Optional[str],
    ) -> "ExpenseForm":
        """Validate raw form fields; any problem is a 400 before the store is touched."""
        try:
            parsed_amount = float((amount or "").strip())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="amount must be a number"
            )
        if not math.isfinite(parsed_amount):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="amount must be a number"
            )

        if not date_value or not date_value.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="date is required"
            )
        try:
            parsed_date = parse_form_datetime(date_value)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="date must look like YYYY-MM-DDTHH:MM:SS"
            )

        return cls(
            amount=parsed_amount,
            description=(description or "").strip() or DEFAULT_DESCRIPTION,
            category=(category or "").strip(),
            date=parsed_date,
        )


# =========================
# Output
# =========================
class ExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    description: str
    category: str
    date: datetime
    user_id: Optional[int] = None


class ExpenseItem(ExpenseOut):
    time: str
    style: CategoryStyle


class ExpenseGroup(BaseModel):
    title: str
    day: date
    total: float = 0.0
    items: List[ExpenseItem] = []
    # first group of a page that carries on the previous page's last day
    continued: bool = False
