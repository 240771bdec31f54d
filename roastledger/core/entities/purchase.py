"""Purchasing domain entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from roastledger.core.entities.common import utc_now
from roastledger.core.entities.stock import BeanVariety


class POStatus(str, Enum):
    """Purchase order lifecycle."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


# Monotonic: nothing leaves rejected or completed
PO_TRANSITIONS: dict[POStatus, frozenset[POStatus]] = {
    POStatus.PENDING: frozenset({POStatus.APPROVED, POStatus.REJECTED}),
    POStatus.APPROVED: frozenset({POStatus.COMPLETED}),
    POStatus.REJECTED: frozenset(),
    POStatus.COMPLETED: frozenset(),
}


class Supplier(BaseModel):
    """Green bean supplier."""

    id: str | None = None
    name: str = Field(..., min_length=1)
    contact_person: str | None = None
    phone: str | None = None
    email: str | None = None
    origin: str | None = None  # e.g. "Aceh Gayo, Indonesia"
    specialties: list[BeanVariety] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)


class PurchaseLineItem(BaseModel):
    """One variety ordered on a purchase order."""

    variety: BeanVariety
    quantity_kg: float = Field(..., gt=0, allow_inf_nan=False)
    price_per_kg: float = Field(..., ge=0, allow_inf_nan=False)

    @property
    def line_total(self) -> float:
        return self.quantity_kg * self.price_per_kg


class PurchaseOrder(BaseModel):
    """Purchase order for green beans."""

    id: str | None = None
    supplier_id: str
    order_date: date = Field(default_factory=date.today)
    expected_delivery_date: date | None = None
    items: list[PurchaseLineItem] = Field(..., min_length=1)
    status: POStatus = POStatus.PENDING
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def total_amount(self) -> float:
        return sum(item.line_total for item in self.items)

    def can_transition_to(self, status: POStatus) -> bool:
        """Check whether moving to the given status keeps the lifecycle monotonic."""
        return status in PO_TRANSITIONS[self.status]
