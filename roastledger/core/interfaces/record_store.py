"""Abstract interface for typed record storage."""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from roastledger.core.entities.stock import BeanVariety, StockItem, StockKind

T = TypeVar("T", bound=BaseModel)


class IRecordStore(ABC, Generic[T]):
    """
    Uniform create/read/update/delete access to one entity type.

    Missing ids raise NotFoundError; malformed writes raise ValidationError.
    """

    @abstractmethod
    async def create(self, record: T) -> str:
        """Persist a new record, assign its id and return the id."""
        pass

    @abstractmethod
    async def get(self, record_id: str) -> T:
        """Get record by ID."""
        pass

    @abstractmethod
    async def update(self, record_id: str, fields: dict[str, Any]) -> T:
        """Apply a partial update and return the updated record."""
        pass

    @abstractmethod
    async def remove(self, record_id: str) -> None:
        """Delete a record."""
        pass

    @abstractmethod
    async def list(self, filters: dict[str, Any] | None = None) -> list[T]:
        """List records, oldest first, optionally matching field equality filters."""
        pass


class IStockStore(IRecordStore[StockItem]):
    """
    Stock item storage.

    quantity_kg cannot be written through this interface; it only changes
    when the ledger store appends an entry.
    """

    @abstractmethod
    async def find(
        self, kind: StockKind, variety: BeanVariety, location: str
    ) -> StockItem | None:
        """Find the stock item holding a variety and kind at a location."""
        pass
