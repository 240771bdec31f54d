"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# Stock & ledger
# =============================================================================


class StockItemResponse(BaseModel):
    """Stock item response DTO."""

    id: str
    kind: str
    variety: str
    quantity_kg: float
    location: str
    version: int
    last_updated: datetime
    created_at: datetime


class StockListResponse(BaseModel):
    items: list[StockItemResponse]
    total: int


class LedgerEntryResponse(BaseModel):
    """Ledger entry response DTO."""

    id: int
    stock_item_id: str
    delta: float
    origin_type: str
    origin_id: str | None = None
    origin: dict[str, Any] = Field(..., description="Full typed origin reference")
    correcting: bool = False
    entry_date: date
    created_at: datetime


class StockLedgerResponse(BaseModel):
    """A stock item with its complete ledger history."""

    stock_item: StockItemResponse
    entries: list[LedgerEntryResponse]
    ledger_balance: float
    balanced: bool = Field(..., description="quantity_kg equals the sum of deltas")


class StockMutationResponse(BaseModel):
    """Stock item after a ledger append."""

    stock_item: StockItemResponse
    entry: LedgerEntryResponse | None = None


class AlertSettingResponse(BaseModel):
    id: str
    variety: str
    kind: str
    threshold_kg: float
    created_at: datetime


class StockAlertResponse(BaseModel):
    alert_setting_id: str
    variety: str
    kind: str
    threshold_kg: float
    current_kg: float


class StockAlertListResponse(BaseModel):
    alerts: list[StockAlertResponse]
    total: int


# =============================================================================
# Purchasing
# =============================================================================


class SupplierResponse(BaseModel):
    id: str
    name: str
    contact_person: str | None = None
    phone: str | None = None
    email: str | None = None
    origin: str | None = None
    specialties: list[str] = Field(default_factory=list)
    created_at: datetime


class PurchaseLineItemResponse(BaseModel):
    """Purchase order line with receipt progress."""

    index: int
    variety: str
    quantity_kg: float
    price_per_kg: float
    line_total: float
    received_kg: float = 0.0


class PurchaseOrderResponse(BaseModel):
    """Purchase order response DTO."""

    id: str
    supplier_id: str
    order_date: date
    expected_delivery_date: date | None = None
    status: str
    items: list[PurchaseLineItemResponse]
    total_amount: float
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class ReceivePurchaseResponse(BaseModel):
    """Response for a purchase receipt."""

    purchase_order: PurchaseOrderResponse
    stock_item: StockItemResponse
    entry: LedgerEntryResponse
    stock_item_created: bool = False
    order_completed: bool = False


# =============================================================================
# Production
# =============================================================================


class RoastInputResponse(BaseModel):
    stock_item_id: str
    weight_kg: float


class RoastEventResponse(BaseModel):
    """Roast event response DTO."""

    id: str
    batch_id: str
    roast_date: date
    inputs: list[RoastInputResponse]
    total_input_weight_kg: float
    output_stock_item_id: str
    output_weight_kg: float
    yield_ratio: float
    operational_cost_per_kg: float
    roaster_name: str | None = None
    external_roastery: str | None = None
    notes: str | None = None
    created_at: datetime


class RecordRoastResponse(BaseModel):
    roast: RoastEventResponse
    output_stock_item: StockItemResponse
    entries: list[LedgerEntryResponse]


class BlendComponentResponse(BaseModel):
    stock_item_id: str
    percentage: float
    weight_kg: float | None = None
    cost_per_kg: float | None = None


class BlendEventResponse(BaseModel):
    """Blend event response DTO."""

    id: str
    name: str
    blend_date: date
    components: list[BlendComponentResponse]
    output_stock_item_id: str
    output_weight_kg: float
    quoted_cost_per_kg: float | None = None
    notes: str | None = None
    created_at: datetime


class RecordBlendResponse(BaseModel):
    blend: BlendEventResponse
    output_stock_item: StockItemResponse
    entries: list[LedgerEntryResponse]


class BlendQuoteResponse(BaseModel):
    cost_per_kg: float
    currency: str
    components: list[BlendComponentResponse]


class BlendAuditResponse(BaseModel):
    blend_event_id: str
    quoted_cost_per_kg: float | None = None
    recomputed_cost_per_kg: float
    matches: bool


# =============================================================================
# Sales & finance
# =============================================================================


class SaleLineResponse(BaseModel):
    stock_item_id: str
    quantity_kg: float
    price_per_kg: float
    line_total: float


class SaleResponse(BaseModel):
    """Sale response DTO."""

    id: str
    invoice_number: str
    customer_name: str
    sale_date: date
    lines: list[SaleLineResponse]
    total_amount: float
    payment_status: str
    shipping_address: str | None = None
    notes: str | None = None
    created_at: datetime


class RecordSaleResponse(BaseModel):
    sale: SaleResponse
    entries: list[LedgerEntryResponse]


class ExpenseResponse(BaseModel):
    id: str
    expense_date: date
    description: str
    category: str
    amount: float
    created_at: datetime


class PackagingResponse(BaseModel):
    id: str
    name: str
    size_kg: float
    cost: float
    created_at: datetime


# =============================================================================
# Valuation
# =============================================================================


class LineageNodeResponse(BaseModel):
    """One priced inbound entry and the lineage behind it."""

    stock_item_id: str
    ledger_entry_id: int
    origin_type: str
    origin_id: str | None = None
    quantity_kg: float
    cost_per_kg: float
    sources: list["LineageNodeResponse"] = Field(default_factory=list)


class CostBasisResponse(BaseModel):
    """Cost basis response DTO."""

    stock_item_id: str
    cost_per_kg: float
    priced_quantity_kg: float
    currency: str
    as_of_entry_id: int | None = None
    lineage: list[LineageNodeResponse] = Field(default_factory=list)


class CogsResponse(BaseModel):
    start_date: date
    end_date: date
    currency: str
    cogs: float
    sales_count: int


class SaleMarginResponse(BaseModel):
    sale_id: str
    currency: str
    revenue: float
    cogs: float
    gross_margin: float


class PeriodFiguresResponse(BaseModel):
    """Profit and loss figures of one date range."""

    start_date: date
    end_date: date
    revenue: float
    cogs: float
    gross_profit: float
    expenses: float
    net_profit: float
    sales_count: int


class FinancialSummaryResponse(PeriodFiguresResponse):
    """Profit and loss for a period, with the preceding period for comparison."""

    currency: str
    accounts_receivable: float
    accounts_payable: float
    previous_period: PeriodFiguresResponse | None = None


class UnitEconomicsResponse(BaseModel):
    """HPP for one retail package."""

    stock_item_id: str
    currency: str
    packaging_id: str | None = None
    packaging_size_kg: float
    bean_cost_per_kg: float
    packaging_cost: float
    other_cost_per_kg: float
    cost_per_package: float
    cost_per_kg: float


# =============================================================================
# System
# =============================================================================


class ComponentHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    available: bool
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    storage_backend: str
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
