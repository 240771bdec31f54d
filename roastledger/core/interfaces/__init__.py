"""Core interfaces (ports) for dependency injection."""

from roastledger.core.interfaces.ledger_store import ILedgerStore
from roastledger.core.interfaces.record_store import IRecordStore, IStockStore
from roastledger.core.interfaces.repositories import Repositories
from roastledger.core.interfaces.transaction import ITransactionManager

__all__ = [
    # Storage interfaces
    "IRecordStore",
    "IStockStore",
    "ILedgerStore",
    "ITransactionManager",
    # Bundle
    "Repositories",
]
