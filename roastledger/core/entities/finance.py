"""Finance domain entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from roastledger.core.entities.common import utc_now


class ExpenseCategory(str, Enum):
    UTILITIES = "utilities"
    SALARY = "salary"
    RENT = "rent"
    MARKETING = "marketing"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class Expense(BaseModel):
    """Operating expense, counted against gross profit."""

    id: str | None = None
    expense_date: date = Field(default_factory=date.today)
    description: str
    category: ExpenseCategory = ExpenseCategory.OTHER
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    created_at: datetime = Field(default_factory=utc_now)


class Packaging(BaseModel):
    """Retail package option used for HPP calculation."""

    id: str | None = None
    name: str
    size_kg: float = Field(..., gt=0, allow_inf_nan=False)
    cost: float = Field(..., ge=0, allow_inf_nan=False)  # per package
    created_at: datetime = Field(default_factory=utc_now)
