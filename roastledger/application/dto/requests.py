"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date

from pydantic import BaseModel, Field, FiniteFloat, model_validator

from roastledger.core.entities import (
    BeanVariety,
    ExpenseCategory,
    PaymentStatus,
    POStatus,
    StockKind,
)


# =============================================================================
# Stock
# =============================================================================


class CreateStockItemRequest(BaseModel):
    """Request to register a stock item.

    A non-zero initial quantity is recorded as an opening-stock adjustment.
    """

    kind: StockKind = Field(..., description="green_bean or roasted_bean")
    variety: BeanVariety = Field(..., description="Bean variety")
    location: str = Field(..., min_length=1, description="Warehouse location")
    initial_quantity_kg: float = Field(
        default=0.0, ge=0, allow_inf_nan=False, description="Opening stock"
    )
    unit_cost: FiniteFloat | None = Field(
        default=None,
        ge=0,
        description="Cost per kg of the opening stock; without it the stock is unpriced",
    )
    reason: str = Field(default="Opening stock", min_length=1)


class UpdateStockItemRequest(BaseModel):
    """Request to move a stock item to another location."""

    location: str = Field(..., min_length=1)


class AdjustStockRequest(BaseModel):
    """Manual correction of a stock item's quantity."""

    delta_kg: float = Field(
        ..., allow_inf_nan=False, description="Signed kilograms, positive adds stock"
    )
    reason: str = Field(..., min_length=1, examples=["Stock count correction"])
    unit_cost: FiniteFloat | None = Field(
        default=None, ge=0, description="Cost per kg when adding priced stock"
    )
    correcting: bool = Field(
        default=False,
        description="Allow the balance to go negative (reconciliation only)",
    )


class CreateAlertSettingRequest(BaseModel):
    """Low-stock threshold for a variety and kind."""

    variety: BeanVariety
    kind: StockKind
    threshold_kg: float = Field(..., ge=0, allow_inf_nan=False)


# =============================================================================
# Purchasing
# =============================================================================


class CreateSupplierRequest(BaseModel):
    """Request to register a green bean supplier."""

    name: str = Field(..., min_length=1)
    contact_person: str | None = None
    phone: str | None = None
    email: str | None = None
    origin: str | None = Field(default=None, examples=["Aceh Gayo, Indonesia"])
    specialties: list[BeanVariety] = Field(default_factory=list)


class PurchaseLineItemRequest(BaseModel):
    """One line of a purchase order."""

    variety: BeanVariety
    quantity_kg: float = Field(..., gt=0, allow_inf_nan=False)
    price_per_kg: float = Field(..., ge=0, allow_inf_nan=False)


class CreatePurchaseOrderRequest(BaseModel):
    """Request to create a purchase order (starts as pending)."""

    supplier_id: str
    items: list[PurchaseLineItemRequest] = Field(..., min_length=1)
    order_date: date | None = Field(default=None, description="Defaults to today")
    expected_delivery_date: date | None = None
    notes: str | None = None


class UpdatePurchaseOrderStatusRequest(BaseModel):
    """Move a purchase order along pending -> approved/rejected -> completed."""

    status: POStatus


class ReceivePurchaseRequest(BaseModel):
    """Receive green beans against an approved purchase order line."""

    purchase_order_id: str
    line_item_index: int = Field(..., ge=0)
    quantity_kg: float = Field(..., gt=0, allow_inf_nan=False)
    location: str | None = Field(
        default=None, description="Defaults to the green bean warehouse"
    )
    receipt_date: date | None = None


# =============================================================================
# Production
# =============================================================================


class RoastInputRequest(BaseModel):
    stock_item_id: str
    weight_kg: float = Field(..., gt=0, allow_inf_nan=False)


class RecordRoastRequest(BaseModel):
    """Roast green beans into roasted beans."""

    inputs: list[RoastInputRequest] = Field(..., min_length=1)
    output_weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    operational_cost_per_kg: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Roasting cost per kg of green input",
    )
    roast_date: date | None = None
    roaster_name: str | None = None
    external_roastery: str | None = Field(
        default=None, description="Name of the toll roastery, if not roasted in-house"
    )
    location: str | None = Field(
        default=None, description="Defaults to the roasted bean warehouse"
    )
    notes: str | None = None

    @model_validator(mode="after")
    def unique_inputs(self) -> "RecordRoastRequest":
        ids = [i.stock_item_id for i in self.inputs]
        if len(ids) != len(set(ids)):
            raise ValueError("each stock item may appear only once in a roast")
        return self


class BlendComponentRequest(BaseModel):
    stock_item_id: str
    percentage: float = Field(..., gt=0, le=100, allow_inf_nan=False)


class RecordBlendRequest(BaseModel):
    """Blend roasted beans into a new blend stock item."""

    name: str = Field(..., min_length=1, examples=["House Blend"])
    components: list[BlendComponentRequest] = Field(..., min_length=1)
    output_weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    blend_date: date | None = None
    location: str | None = Field(
        default=None, description="Defaults to the roasted bean warehouse"
    )
    notes: str | None = None


class QuoteBlendRequest(BaseModel):
    """Price a blend recipe without producing it."""

    components: list[BlendComponentRequest] = Field(..., min_length=1)


# =============================================================================
# Sales & finance
# =============================================================================


class SaleLineRequest(BaseModel):
    stock_item_id: str
    quantity_kg: float = Field(..., gt=0, allow_inf_nan=False)
    price_per_kg: float = Field(..., ge=0, allow_inf_nan=False)


class RecordSaleRequest(BaseModel):
    """Record a sale and ship its lines from stock."""

    invoice_number: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1)
    lines: list[SaleLineRequest] = Field(..., min_length=1)
    sale_date: date | None = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    shipping_address: str | None = None
    notes: str | None = None


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: PaymentStatus


class CreateExpenseRequest(BaseModel):
    description: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    category: ExpenseCategory = ExpenseCategory.OTHER
    expense_date: date | None = None


class CreatePackagingRequest(BaseModel):
    name: str = Field(..., min_length=1, examples=["250g valve bag"])
    size_kg: float = Field(..., gt=0, allow_inf_nan=False)
    cost: float = Field(..., ge=0, allow_inf_nan=False, description="Cost per package")


class UnitEconomicsRequest(BaseModel):
    """HPP for one package: either a stored packaging option or explicit size and cost."""

    stock_item_id: str
    packaging_id: str | None = None
    packaging_size_kg: FiniteFloat | None = Field(default=None, gt=0)
    packaging_cost: FiniteFloat | None = Field(default=None, ge=0)
    other_cost_per_kg: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def packaging_given(self) -> "UnitEconomicsRequest":
        if self.packaging_id is None and (
            self.packaging_size_kg is None or self.packaging_cost is None
        ):
            raise ValueError(
                "provide packaging_id or both packaging_size_kg and packaging_cost"
            )
        return self
