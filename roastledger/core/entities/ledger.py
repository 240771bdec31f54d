"""
Warehouse ledger entities.

A ledger entry records one signed quantity change to one stock item. The
reason for the change is a typed origin reference, never free text, so the
lineage of a stock item can be followed without parsing notes.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, FiniteFloat, field_validator

from roastledger.core.entities.common import utc_now


class OriginType(str, Enum):
    """Kinds of event that can move stock."""

    PURCHASE_RECEIPT = "purchase_receipt"
    ROAST_OUTPUT = "roast_output"
    ROAST_CONSUMPTION = "roast_consumption"
    BLEND_OUTPUT = "blend_output"
    BLEND_CONSUMPTION = "blend_consumption"
    SALE_CONSUMPTION = "sale_consumption"
    MANUAL_ADJUSTMENT = "manual_adjustment"


class PurchaseReceipt(BaseModel):
    """Green beans received against a purchase order line."""

    type: Literal["purchase_receipt"] = "purchase_receipt"
    purchase_order_id: str
    line_item_index: int = Field(..., ge=0)

    @property
    def origin_id(self) -> str:
        return self.purchase_order_id


class RoastOutput(BaseModel):
    """Roasted beans produced by a roast event."""

    type: Literal["roast_output"] = "roast_output"
    roast_event_id: str

    @property
    def origin_id(self) -> str:
        return self.roast_event_id


class RoastConsumption(BaseModel):
    """Green beans charged into a roast event."""

    type: Literal["roast_consumption"] = "roast_consumption"
    roast_event_id: str

    @property
    def origin_id(self) -> str:
        return self.roast_event_id


class BlendOutput(BaseModel):
    """Blended beans produced by a blend event."""

    type: Literal["blend_output"] = "blend_output"
    blend_event_id: str

    @property
    def origin_id(self) -> str:
        return self.blend_event_id


class BlendConsumption(BaseModel):
    """Roasted beans used as a blend component."""

    type: Literal["blend_consumption"] = "blend_consumption"
    blend_event_id: str

    @property
    def origin_id(self) -> str:
        return self.blend_event_id


class SaleConsumption(BaseModel):
    """Stock shipped on a sale."""

    type: Literal["sale_consumption"] = "sale_consumption"
    sale_id: str

    @property
    def origin_id(self) -> str:
        return self.sale_id


class ManualAdjustment(BaseModel):
    """
    Operator correction (count correction, initial stock, spoilage).

    unit_cost prices an inbound adjustment for lineage purposes. Without it the
    adjustment only corrects quantity and carries no cost of its own.
    """

    type: Literal["manual_adjustment"] = "manual_adjustment"
    reason: str = Field(..., min_length=1)
    unit_cost: FiniteFloat | None = Field(default=None, ge=0)

    @property
    def origin_id(self) -> None:
        return None


LedgerOrigin = Annotated[
    Union[
        PurchaseReceipt,
        RoastOutput,
        RoastConsumption,
        BlendOutput,
        BlendConsumption,
        SaleConsumption,
        ManualAdjustment,
    ],
    Field(discriminator="type"),
]


class LedgerEntry(BaseModel):
    """Immutable record of one quantity change to one stock item."""

    id: int | None = None  # monotonic; ordering by id is chronological order
    stock_item_id: str
    delta: float = Field(allow_inf_nan=False)  # positive = inbound, negative = outbound
    origin: LedgerOrigin
    correcting: bool = False
    entry_date: date = Field(default_factory=date.today)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("delta")
    @classmethod
    def non_zero_delta(cls, v: float) -> float:
        if v == 0:
            raise ValueError("delta must be non-zero")
        return v

    @property
    def is_inbound(self) -> bool:
        return self.delta > 0

    @property
    def origin_type(self) -> OriginType:
        return OriginType(self.origin.type)
