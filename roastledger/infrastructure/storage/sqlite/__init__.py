"""SQLite storage implementations."""

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
from roastledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from roastledger.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from roastledger.infrastructure.storage.sqlite.record_store import SQLiteRecordStore
from roastledger.infrastructure.storage.sqlite.stock_store import SQLiteStockStore
from roastledger.infrastructure.storage.sqlite.transaction import (
    SQLiteTransactionManager,
)


def create_sqlite_repositories() -> Repositories:
    """Wire every store to the global connection pool."""
    return Repositories(
        stock=SQLiteStockStore(),
        ledger=SQLiteLedgerStore(),
        suppliers=SQLiteRecordStore("suppliers", Supplier, "SP"),
        purchase_orders=SQLiteRecordStore("purchase_orders", PurchaseOrder, "PO"),
        roasts=SQLiteRecordStore("roast_events", RoastEvent, "RT"),
        blends=SQLiteRecordStore("blend_events", BlendEvent, "BL"),
        sales=SQLiteRecordStore("sales", Sale, "SL"),
        expenses=SQLiteRecordStore("expenses", Expense, "EX"),
        packaging=SQLiteRecordStore("packaging", Packaging, "PK"),
        alert_settings=SQLiteRecordStore("alert_settings", AlertSetting, "AL"),
        transactions=SQLiteTransactionManager(),
    )


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteRecordStore",
    "SQLiteStockStore",
    "SQLiteLedgerStore",
    "SQLiteTransactionManager",
    # Factory
    "create_sqlite_repositories",
]
