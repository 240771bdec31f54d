"""Bundle of stores handed to services and use cases."""

from dataclasses import dataclass

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
from roastledger.core.interfaces.ledger_store import ILedgerStore
from roastledger.core.interfaces.record_store import IRecordStore, IStockStore
from roastledger.core.interfaces.transaction import ITransactionManager


@dataclass
class Repositories:
    """All stores of one backend, sharing one transaction manager."""

    stock: IStockStore
    ledger: ILedgerStore
    suppliers: IRecordStore[Supplier]
    purchase_orders: IRecordStore[PurchaseOrder]
    roasts: IRecordStore[RoastEvent]
    blends: IRecordStore[BlendEvent]
    sales: IRecordStore[Sale]
    expenses: IRecordStore[Expense]
    packaging: IRecordStore[Packaging]
    alert_settings: IRecordStore[AlertSetting]
    transactions: ITransactionManager
