"""
Dependency injection container for FastAPI.

Provides repositories, services and use case instances to route handlers.
Tests replace any of these through app.dependency_overrides.
"""

from roastledger.application.services import (
    get_lineage_resolver,
    get_valuation_engine,
    get_warehouse_ledger,
)
from roastledger.application.use_cases import (
    AdjustStockUseCase,
    AuditBlendUseCase,
    CheckStockAlertsUseCase,
    CreatePurchaseOrderUseCase,
    CreateStockItemUseCase,
    GetCogsUseCase,
    GetCostBasisUseCase,
    GetFinancialSummaryUseCase,
    GetSaleMarginUseCase,
    GetUnitEconomicsUseCase,
    QuoteBlendUseCase,
    ReceivePurchaseUseCase,
    RecordBlendUseCase,
    RecordRoastUseCase,
    RecordSaleUseCase,
    UpdatePurchaseOrderStatusUseCase,
)
from roastledger.core.interfaces import Repositories
from roastledger.core.services import WarehouseLedger
from roastledger.infrastructure.storage import get_repositories


# Storage dependencies
def get_repos() -> Repositories:
    """Get the repositories of the configured backend."""
    return get_repositories()


# Service dependencies
def get_ledger() -> WarehouseLedger:
    """Get warehouse ledger service."""
    return get_warehouse_ledger()


# Stock use cases
def get_create_stock_item_use_case() -> CreateStockItemUseCase:
    return CreateStockItemUseCase(get_repositories(), get_warehouse_ledger())


def get_adjust_stock_use_case() -> AdjustStockUseCase:
    return AdjustStockUseCase(get_repositories(), get_warehouse_ledger())


def get_check_stock_alerts_use_case() -> CheckStockAlertsUseCase:
    return CheckStockAlertsUseCase(get_repositories())


# Purchasing use cases
def get_create_purchase_order_use_case() -> CreatePurchaseOrderUseCase:
    return CreatePurchaseOrderUseCase(get_repositories())


def get_update_purchase_order_status_use_case() -> UpdatePurchaseOrderStatusUseCase:
    return UpdatePurchaseOrderStatusUseCase(get_repositories())


def get_receive_purchase_use_case() -> ReceivePurchaseUseCase:
    return ReceivePurchaseUseCase(get_repositories(), get_warehouse_ledger())


# Production use cases
def get_record_roast_use_case() -> RecordRoastUseCase:
    return RecordRoastUseCase(get_repositories(), get_warehouse_ledger())


def get_record_blend_use_case() -> RecordBlendUseCase:
    return RecordBlendUseCase(
        get_repositories(), get_warehouse_ledger(), get_valuation_engine()
    )


def get_quote_blend_use_case() -> QuoteBlendUseCase:
    return QuoteBlendUseCase(get_repositories(), get_valuation_engine())


def get_audit_blend_use_case() -> AuditBlendUseCase:
    return AuditBlendUseCase(get_repositories(), get_valuation_engine())


# Sales use cases
def get_record_sale_use_case() -> RecordSaleUseCase:
    return RecordSaleUseCase(get_repositories(), get_warehouse_ledger())


def get_sale_margin_use_case() -> GetSaleMarginUseCase:
    return GetSaleMarginUseCase(get_repositories(), get_valuation_engine())


# Valuation use cases
def get_cost_basis_use_case() -> GetCostBasisUseCase:
    return GetCostBasisUseCase(get_repositories(), get_lineage_resolver())


def get_cogs_use_case() -> GetCogsUseCase:
    return GetCogsUseCase(get_repositories(), get_valuation_engine())


def get_financial_summary_use_case() -> GetFinancialSummaryUseCase:
    return GetFinancialSummaryUseCase(get_repositories(), get_valuation_engine())


def get_unit_economics_use_case() -> GetUnitEconomicsUseCase:
    return GetUnitEconomicsUseCase(get_repositories(), get_valuation_engine())
