"""Sales domain entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from roastledger.core.entities.common import utc_now


class PaymentStatus(str, Enum):
    """Payment state of a sale."""

    PAID = "paid"
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    REFUNDED = "refunded"


class SaleLine(BaseModel):
    """Quantity of one stock item sold at a price per kg."""

    stock_item_id: str
    quantity_kg: float = Field(..., gt=0, allow_inf_nan=False)
    price_per_kg: float = Field(..., ge=0, allow_inf_nan=False)

    @property
    def line_total(self) -> float:
        return self.quantity_kg * self.price_per_kg


class Sale(BaseModel):
    """
    A sales record.

    Carries sale prices only. The cost of what was sold is derived from the
    ledger by the valuation engine and never stored here.
    """

    id: str | None = None
    invoice_number: str
    customer_name: str
    sale_date: date = Field(default_factory=date.today)
    lines: list[SaleLine] = Field(..., min_length=1)
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    shipping_address: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def total_amount(self) -> float:
        return sum(line.line_total for line in self.lines)
