"""
Warehouse ledger service.

The only mutation path for stock quantities. Every change is an immutable
ledger entry carrying a typed origin reference.
"""

import math
from datetime import date

from roastledger.config import get_logger
from roastledger.core.entities.ledger import (
    LedgerEntry,
    LedgerOrigin,
    ManualAdjustment,
    OriginType,
)
from roastledger.core.exceptions import ValidationError
from roastledger.core.interfaces import ILedgerStore, IStockStore

logger = get_logger(__name__)


class WarehouseLedger:
    """
    Appends and reads ledger entries.

    Outbound entries that would drive a balance below zero fail with
    InsufficientStockError, except correcting ManualAdjustment entries.
    """

    DEFAULT_QUANTITY_TOLERANCE = 1e-6

    def __init__(
        self,
        ledger_store: ILedgerStore,
        stock_store: IStockStore,
        quantity_tolerance: float | None = None,
    ):
        self._ledger = ledger_store
        self._stock = stock_store
        self._tolerance = (
            quantity_tolerance
            if quantity_tolerance is not None
            else self.DEFAULT_QUANTITY_TOLERANCE
        )

    async def append(
        self,
        stock_item_id: str,
        delta: float,
        origin: LedgerOrigin,
        correcting: bool = False,
        entry_date: date | None = None,
    ) -> LedgerEntry:
        """
        Record a quantity change.

        Args:
            stock_item_id: Stock item being changed
            delta: Signed kilograms, positive inbound
            origin: Typed reference to the causing event
            correcting: Allow the balance to go negative (ManualAdjustment only)
            entry_date: Business date, defaults to today

        Returns:
            The stored entry with its ledger position assigned

        Raises:
            ValidationError: zero or non-finite delta, or correcting on a
                non-adjustment origin
            NotFoundError: unknown stock item
            InsufficientStockError: balance would go negative
        """
        if not math.isfinite(delta):
            raise ValidationError("delta", "must be a finite number of kilograms", delta)
        if delta == 0:
            raise ValidationError("delta", "ledger entries must change the quantity", delta)
        if correcting and not isinstance(origin, ManualAdjustment):
            raise ValidationError(
                "correcting",
                "only manual adjustments may be marked as correcting",
                origin.type,
            )

        entry = LedgerEntry(
            stock_item_id=stock_item_id,
            delta=delta,
            origin=origin,
            correcting=correcting,
            entry_date=entry_date or date.today(),
        )
        return await self._ledger.append(entry, allow_negative=correcting)

    async def adjust(
        self,
        stock_item_id: str,
        delta: float,
        reason: str,
        unit_cost: float | None = None,
        correcting: bool = False,
    ) -> LedgerEntry:
        """Record a manual correction (count correction, spoilage, opening stock)."""
        if unit_cost is not None and not math.isfinite(unit_cost):
            raise ValidationError("unit_cost", "must be a finite cost per kg", unit_cost)
        origin = ManualAdjustment(reason=reason, unit_cost=unit_cost)
        entry = await self.append(stock_item_id, delta, origin, correcting=correcting)
        logger.info(
            "stock_adjusted",
            stock_item_id=stock_item_id,
            delta=delta,
            reason=reason,
            correcting=correcting,
        )
        return entry

    async def entries_for(
        self, stock_item_id: str, before_entry_id: int | None = None
    ) -> list[LedgerEntry]:
        """Entries for a stock item in chronological order."""
        return await self._ledger.list_for_stock_item(stock_item_id, before_entry_id)

    async def entries_by_origin(
        self, origin_type: OriginType, origin_id: str
    ) -> list[LedgerEntry]:
        return await self._ledger.list_by_origin(origin_type, origin_id)

    async def balance_of(self, stock_item_id: str) -> float:
        return await self._ledger.balance(stock_item_id)

    async def verify_balance(self, stock_item_id: str) -> bool:
        """Check that the stock item's quantity equals the sum of its ledger deltas."""
        item = await self._stock.get(stock_item_id)
        ledger_sum = await self._ledger.balance(stock_item_id)
        consistent = abs(item.quantity_kg - ledger_sum) <= self._tolerance
        if not consistent:
            logger.warning(
                "ledger_balance_mismatch",
                stock_item_id=stock_item_id,
                quantity_kg=item.quantity_kg,
                ledger_sum=ledger_sum,
            )
        return consistent
