"""SQLite implementation of the append-only warehouse ledger."""

import json
from datetime import date, datetime

import aiosqlite

from roastledger.config import get_logger, get_settings
from roastledger.core.entities.common import utc_now
from roastledger.core.entities.ledger import LedgerEntry, OriginType
from roastledger.core.exceptions import InsufficientStockError, NotFoundError
from roastledger.core.interfaces.ledger_store import ILedgerStore
from roastledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)


class SQLiteLedgerStore(ILedgerStore):
    """
    Ledger entries plus the materialized stock_items.quantity_kg.

    An append runs one conditional UPDATE of the stock item and one INSERT of
    the entry inside the same BEGIN IMMEDIATE transaction, so the balance check
    and the write cannot interleave with another writer. Rows are protected
    from UPDATE and DELETE by triggers.
    """

    def __init__(self, quantity_tolerance: float | None = None):
        if quantity_tolerance is None:
            quantity_tolerance = get_settings().valuation.quantity_tolerance
        self.quantity_tolerance = quantity_tolerance

    async def append(
        self, entry: LedgerEntry, allow_negative: bool = False
    ) -> LedgerEntry:
        """Insert an entry and refresh the stock item's quantity atomically."""
        now = utc_now()

        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE stock_items SET
                    quantity_kg = quantity_kg + ?,
                    version = version + 1,
                    last_updated = ?
                WHERE id = ? AND (? OR quantity_kg + ? >= ?)
                """,
                (
                    entry.delta,
                    now.isoformat(),
                    entry.stock_item_id,
                    int(allow_negative),
                    entry.delta,
                    -self.quantity_tolerance,
                ),
            )
            if cursor.rowcount == 0:
                cursor = await conn.execute(
                    "SELECT quantity_kg FROM stock_items WHERE id = ?",
                    (entry.stock_item_id,),
                )
                row = await cursor.fetchone()
                if row is None:
                    raise NotFoundError("StockItem", entry.stock_item_id)
                raise InsufficientStockError(
                    entry.stock_item_id,
                    requested=-entry.delta,
                    available=float(row["quantity_kg"]),
                )

            cursor = await conn.execute(
                """
                INSERT INTO ledger_entries (
                    stock_item_id, delta, origin_type, origin_id,
                    origin_json, correcting, entry_date, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.stock_item_id,
                    entry.delta,
                    entry.origin_type.value,
                    entry.origin.origin_id,
                    entry.origin.model_dump_json(),
                    int(entry.correcting),
                    entry.entry_date.isoformat(),
                    entry.created_at.isoformat(),
                ),
            )
            stored = entry.model_copy(update={"id": cursor.lastrowid})

        logger.info(
            "ledger_entry_appended",
            entry_id=stored.id,
            stock_item_id=stored.stock_item_id,
            delta=stored.delta,
            origin_type=stored.origin_type.value,
            origin_id=stored.origin.origin_id,
            correcting=stored.correcting,
        )
        return stored

    async def list_for_stock_item(
        self, stock_item_id: str, before_entry_id: int | None = None
    ) -> list[LedgerEntry]:
        """Entries for a stock item in chronological order."""
        query = "SELECT * FROM ledger_entries WHERE stock_item_id = ?"
        params: list = [stock_item_id]
        if before_entry_id is not None:
            query += " AND id < ?"
            params.append(before_entry_id)
        query += " ORDER BY id"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    async def list_by_origin(
        self, origin_type: OriginType, origin_id: str
    ) -> list[LedgerEntry]:
        """Entries produced by one origin event."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM ledger_entries
                WHERE origin_type = ? AND origin_id = ?
                ORDER BY id
                """,
                (origin_type.value, origin_id),
            )
            rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    async def list_entries(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        origin_type: OriginType | None = None,
    ) -> list[LedgerEntry]:
        """Entries within an entry-date range (inclusive)."""
        conditions = []
        params: list = []
        if start_date is not None:
            conditions.append("entry_date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            conditions.append("entry_date <= ?")
            params.append(end_date.isoformat())
        if origin_type is not None:
            conditions.append("origin_type = ?")
            params.append(origin_type.value)

        query = "SELECT * FROM ledger_entries"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY id"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    async def balance(self, stock_item_id: str) -> float:
        """Sum of deltas for a stock item."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT COALESCE(SUM(delta), 0) FROM ledger_entries WHERE stock_item_id = ?",
                (stock_item_id,),
            )
            row = await cursor.fetchone()
        return float(row[0])

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> LedgerEntry:
        """Convert a database row to a LedgerEntry entity."""
        return LedgerEntry(
            id=row["id"],
            stock_item_id=row["stock_item_id"],
            delta=float(row["delta"]),
            origin=json.loads(row["origin_json"]),
            correcting=bool(row["correcting"]),
            entry_date=date.fromisoformat(row["entry_date"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
