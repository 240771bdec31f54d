"""Application use cases."""

from roastledger.application.use_cases.adjust_stock import AdjustStockUseCase
from roastledger.application.use_cases.blend_pricing import (
    AuditBlendUseCase,
    QuoteBlendUseCase,
)
from roastledger.application.use_cases.check_stock_alerts import CheckStockAlertsUseCase
from roastledger.application.use_cases.create_stock_item import CreateStockItemUseCase
from roastledger.application.use_cases.get_cost_basis import GetCostBasisUseCase
from roastledger.application.use_cases.get_financials import (
    GetCogsUseCase,
    GetFinancialSummaryUseCase,
    GetSaleMarginUseCase,
)
from roastledger.application.use_cases.get_unit_economics import GetUnitEconomicsUseCase
from roastledger.application.use_cases.manage_purchase_order import (
    CreatePurchaseOrderUseCase,
    UpdatePurchaseOrderStatusUseCase,
)
from roastledger.application.use_cases.receive_purchase import ReceivePurchaseUseCase
from roastledger.application.use_cases.record_blend import RecordBlendUseCase
from roastledger.application.use_cases.record_roast import RecordRoastUseCase
from roastledger.application.use_cases.record_sale import RecordSaleUseCase

__all__ = [
    # Commands
    "CreateStockItemUseCase",
    "AdjustStockUseCase",
    "CreatePurchaseOrderUseCase",
    "UpdatePurchaseOrderStatusUseCase",
    "ReceivePurchaseUseCase",
    "RecordRoastUseCase",
    "RecordBlendUseCase",
    "RecordSaleUseCase",
    # Queries
    "GetCostBasisUseCase",
    "GetCogsUseCase",
    "GetSaleMarginUseCase",
    "GetFinancialSummaryUseCase",
    "GetUnitEconomicsUseCase",
    "QuoteBlendUseCase",
    "AuditBlendUseCase",
    "CheckStockAlertsUseCase",
]
