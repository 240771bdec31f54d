"""In-memory storage for offline use, demos and tests. Nothing is persisted."""

from roastledger.core.entities import (
    AlertSetting,
    BlendEvent,
    Expense,
    Packaging,
    PurchaseOrder,
    RoastEvent,
    Sale,
    Supplier,
)
from roastledger.core.interfaces import Repositories
from roastledger.infrastructure.storage.memory.database import (
    MemoryDatabase,
    MemoryTransactionManager,
)
from roastledger.infrastructure.storage.memory.stores import (
    MemoryLedgerStore,
    MemoryRecordStore,
    MemoryStockStore,
)


def create_memory_repositories(db: MemoryDatabase | None = None) -> Repositories:
    """Wire every store to one MemoryDatabase."""
    db = db or MemoryDatabase()
    return Repositories(
        stock=MemoryStockStore(db),
        ledger=MemoryLedgerStore(db),
        suppliers=MemoryRecordStore(db, "suppliers", Supplier, "SP"),
        purchase_orders=MemoryRecordStore(db, "purchase_orders", PurchaseOrder, "PO"),
        roasts=MemoryRecordStore(db, "roast_events", RoastEvent, "RT"),
        blends=MemoryRecordStore(db, "blend_events", BlendEvent, "BL"),
        sales=MemoryRecordStore(db, "sales", Sale, "SL"),
        expenses=MemoryRecordStore(db, "expenses", Expense, "EX"),
        packaging=MemoryRecordStore(db, "packaging", Packaging, "PK"),
        alert_settings=MemoryRecordStore(db, "alert_settings", AlertSetting, "AL"),
        transactions=MemoryTransactionManager(db),
    )


__all__ = [
    "MemoryDatabase",
    "MemoryTransactionManager",
    "MemoryRecordStore",
    "MemoryStockStore",
    "MemoryLedgerStore",
    "create_memory_repositories",
]
