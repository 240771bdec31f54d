"""Core domain entities."""

from roastledger.core.entities.blending import BlendComponent, BlendEvent
from roastledger.core.entities.finance import Expense, ExpenseCategory, Packaging
from roastledger.core.entities.ledger import (
    BlendConsumption,
    BlendOutput,
    LedgerEntry,
    LedgerOrigin,
    ManualAdjustment,
    OriginType,
    PurchaseReceipt,
    RoastConsumption,
    RoastOutput,
    SaleConsumption,
)
from roastledger.core.entities.purchase import (
    POStatus,
    PurchaseLineItem,
    PurchaseOrder,
    Supplier,
)
from roastledger.core.entities.roasting import RoastEvent, RoastInput
from roastledger.core.entities.sale import PaymentStatus, Sale, SaleLine
from roastledger.core.entities.stock import (
    AlertSetting,
    BeanVariety,
    StockAlert,
    StockItem,
    StockKind,
)
from roastledger.core.entities.valuation import (
    BlendAudit,
    CostBasis,
    FinancialSummary,
    LineageNode,
    PeriodFigures,
    SaleMargin,
    UnitEconomics,
)

__all__ = [
    # Stock entities
    "StockItem",
    "StockKind",
    "BeanVariety",
    "AlertSetting",
    "StockAlert",
    # Ledger entities
    "LedgerEntry",
    "LedgerOrigin",
    "OriginType",
    "PurchaseReceipt",
    "RoastOutput",
    "RoastConsumption",
    "BlendOutput",
    "BlendConsumption",
    "SaleConsumption",
    "ManualAdjustment",
    # Purchasing entities
    "Supplier",
    "PurchaseOrder",
    "PurchaseLineItem",
    "POStatus",
    # Production entities
    "RoastEvent",
    "RoastInput",
    "BlendEvent",
    "BlendComponent",
    # Sales entities
    "Sale",
    "SaleLine",
    "PaymentStatus",
    # Finance entities
    "Expense",
    "ExpenseCategory",
    "Packaging",
    # Valuation results
    "CostBasis",
    "LineageNode",
    "UnitEconomics",
    "SaleMargin",
    "BlendAudit",
    "FinancialSummary",
    "PeriodFigures",
]
