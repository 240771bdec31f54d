"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from roastledger.application.dto.requests import (
    AdjustStockRequest,
    CreateAlertSettingRequest,
    CreateExpenseRequest,
    CreatePackagingRequest,
    CreatePurchaseOrderRequest,
    CreateStockItemRequest,
    CreateSupplierRequest,
    QuoteBlendRequest,
    ReceivePurchaseRequest,
    RecordBlendRequest,
    RecordRoastRequest,
    RecordSaleRequest,
    UnitEconomicsRequest,
    UpdatePaymentStatusRequest,
    UpdatePurchaseOrderStatusRequest,
    UpdateStockItemRequest,
)
from roastledger.application.dto.responses import (
    CostBasisResponse,
    ErrorResponse,
    FinancialSummaryResponse,
    HealthResponse,
    LedgerEntryResponse,
    PurchaseOrderResponse,
    StockItemResponse,
)

__all__ = [
    # Requests
    "CreateStockItemRequest",
    "UpdateStockItemRequest",
    "AdjustStockRequest",
    "CreateAlertSettingRequest",
    "CreateSupplierRequest",
    "CreatePurchaseOrderRequest",
    "UpdatePurchaseOrderStatusRequest",
    "UpdatePaymentStatusRequest",
    "ReceivePurchaseRequest",
    "RecordRoastRequest",
    "RecordBlendRequest",
    "QuoteBlendRequest",
    "RecordSaleRequest",
    "CreateExpenseRequest",
    "CreatePackagingRequest",
    "UnitEconomicsRequest",
    # Responses
    "StockItemResponse",
    "LedgerEntryResponse",
    "PurchaseOrderResponse",
    "CostBasisResponse",
    "FinancialSummaryResponse",
    "HealthResponse",
    "ErrorResponse",
]
