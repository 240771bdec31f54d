"""SQLite implementation of stock item storage."""

import sqlite3
from datetime import datetime
from typing import Any

import aiosqlite

from roastledger.config import get_logger, get_settings
from roastledger.core.entities.stock import BeanVariety, StockItem, StockKind
from roastledger.core.exceptions import NotFoundError, ValidationError
from roastledger.core.interfaces.record_store import IStockStore
from roastledger.infrastructure.storage.ids import generate_id
from roastledger.infrastructure.storage.records import (
    check_update_fields,
    matches,
    validate_record,
)
from roastledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)

# Owned by the ledger store
LEDGER_FIELDS = frozenset({"id", "quantity_kg", "version", "last_updated"})


class SQLiteStockStore(IStockStore):
    """SQLite implementation of stock item storage."""

    def __init__(self, quantity_tolerance: float | None = None):
        if quantity_tolerance is None:
            quantity_tolerance = get_settings().valuation.quantity_tolerance
        self.quantity_tolerance = quantity_tolerance

    async def create(self, record: StockItem) -> str:
        """Create a stock item. Stock arrives only through ledger entries."""
        if record.quantity_kg != 0:
            raise ValidationError(
                "quantity_kg",
                "new stock items start at zero; record stock with a ledger entry",
                record.quantity_kg,
            )
        if record.id is None:
            record.id = generate_id("ST")
        item = validate_record(StockItem, record.model_dump())

        async with get_transaction() as conn:
            try:
                await conn.execute(
                    """
                    INSERT INTO stock_items (
                        id, kind, variety, quantity_kg, location,
                        version, last_updated, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.kind.value,
                        item.variety.value,
                        0.0,
                        item.location,
                        0,
                        item.last_updated.isoformat(),
                        item.created_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise ValidationError("id", "stock item id already exists", item.id) from e

        logger.info(
            "stock_item_created",
            stock_item_id=item.id,
            kind=item.kind.value,
            variety=item.variety.value,
            location=item.location,
        )
        return item.id

    async def get(self, record_id: str) -> StockItem:
        """Get stock item by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_items WHERE id = ?", (record_id,)
            )
            row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("StockItem", record_id)
        return self._row_to_stock_item(row)

    async def update(self, record_id: str, fields: dict[str, Any]) -> StockItem:
        """Update descriptive fields (kind, variety, location)."""
        check_update_fields(StockItem, fields, protected=LEDGER_FIELDS)

        async with get_transaction() as conn:
            current = await self.get(record_id)
            updated = validate_record(StockItem, {**current.model_dump(), **fields})
            await conn.execute(
                """
                UPDATE stock_items SET kind = ?, variety = ?, location = ?
                WHERE id = ?
                """,
                (
                    updated.kind.value,
                    updated.variety.value,
                    updated.location,
                    record_id,
                ),
            )

        logger.info("stock_item_updated", stock_item_id=record_id, fields=sorted(fields))
        return updated

    async def remove(self, record_id: str) -> None:
        """Remove an empty stock item. Its ledger history is kept."""
        async with get_transaction() as conn:
            item = await self.get(record_id)
            if abs(item.quantity_kg) > self.quantity_tolerance:
                raise ValidationError(
                    "quantity_kg",
                    "stock item still holds stock; adjust it to zero first",
                    item.quantity_kg,
                )
            await conn.execute("DELETE FROM stock_items WHERE id = ?", (record_id,))

        logger.info("stock_item_removed", stock_item_id=record_id)

    async def list(self, filters: dict[str, Any] | None = None) -> list[StockItem]:
        """List stock items, oldest first."""
        if filters:
            check_update_fields(StockItem, filters, protected=frozenset())

        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_items ORDER BY created_at, rowid"
            )
            rows = await cursor.fetchall()

        items = [self._row_to_stock_item(row) for row in rows]
        return [i for i in items if matches(i.model_dump(mode="json"), filters)]

    async def find(
        self, kind: StockKind, variety: BeanVariety, location: str
    ) -> StockItem | None:
        """Find the stock item holding a variety and kind at a location."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_items
                WHERE kind = ? AND variety = ? AND location = ?
                ORDER BY created_at, rowid
                LIMIT 1
                """,
                (kind.value, variety.value, location),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_stock_item(row)

    @staticmethod
    def _row_to_stock_item(row: aiosqlite.Row) -> StockItem:
        """Convert a database row to a StockItem entity."""
        return StockItem(
            id=row["id"],
            kind=StockKind(row["kind"]),
            variety=BeanVariety(row["variety"]),
            quantity_kg=float(row["quantity_kg"]),
            location=row["location"],
            version=row["version"],
            last_updated=datetime.fromisoformat(row["last_updated"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
