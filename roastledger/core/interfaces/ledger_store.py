"""Abstract interface for warehouse ledger storage."""

from abc import ABC, abstractmethod
from datetime import date

from roastledger.core.entities.ledger import LedgerEntry, OriginType


class ILedgerStore(ABC):
    """Append-only storage for ledger entries."""

    @abstractmethod
    async def append(
        self, entry: LedgerEntry, allow_negative: bool = False
    ) -> LedgerEntry:
        """
        Insert an entry and refresh the stock item's quantity atomically.

        Raises NotFoundError for an unknown stock item and
        InsufficientStockError if the balance would go negative and
        allow_negative is False.
        """
        pass

    @abstractmethod
    async def list_for_stock_item(
        self, stock_item_id: str, before_entry_id: int | None = None
    ) -> list[LedgerEntry]:
        """Entries for a stock item in chronological order."""
        pass

    @abstractmethod
    async def list_by_origin(
        self, origin_type: OriginType, origin_id: str
    ) -> list[LedgerEntry]:
        """Entries produced by one origin event."""
        pass

    @abstractmethod
    async def list_entries(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        origin_type: OriginType | None = None,
    ) -> list[LedgerEntry]:
        """Entries within an entry-date range (inclusive)."""
        pass

    @abstractmethod
    async def balance(self, stock_item_id: str) -> float:
        """Sum of deltas for a stock item."""
        pass
