"""SQLite implementation of document-style record storage."""

import sqlite3
from typing import Any

import aiosqlite

from roastledger.config import get_logger
from roastledger.core.entities.common import utc_now
from roastledger.core.exceptions import NotFoundError, ValidationError
from roastledger.core.interfaces.record_store import IRecordStore, T
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


class SQLiteRecordStore(IRecordStore[T]):
    """
    Stores one entity type as JSON bodies in a single table.

    The table has columns (id, data_json, created_at, updated_at).
    """

    def __init__(self, table: str, model: type[T], id_prefix: str):
        self.table = table
        self.model = model
        self.id_prefix = id_prefix
        self.entity_name = model.__name__

    async def create(self, record: T) -> str:
        """Persist a new record, assign its id and return the id."""
        if record.id is None:
            record.id = generate_id(self.id_prefix)
        validated = validate_record(self.model, record.model_dump())
        now = utc_now().isoformat()

        async with get_transaction() as conn:
            try:
                await conn.execute(
                    f"""
                    INSERT INTO {self.table} (id, data_json, created_at, updated_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (validated.id, validated.model_dump_json(), now, now),
                )
            except sqlite3.IntegrityError as e:
                raise ValidationError("id", "record id already exists", validated.id) from e

        logger.info(f"{self.table}_record_created", record_id=validated.id)
        return validated.id

    async def get(self, record_id: str) -> T:
        """Get record by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT data_json FROM {self.table} WHERE id = ?", (record_id,)
            )
            row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(self.entity_name, record_id)
        return self._row_to_record(row)

    async def update(self, record_id: str, fields: dict[str, Any]) -> T:
        """Apply a partial update and return the updated record."""
        check_update_fields(self.model, fields)

        async with get_transaction() as conn:
            current = await self.get(record_id)
            data = {**current.model_dump(), **fields}
            if "updated_at" in self.model.model_fields and "updated_at" not in fields:
                data["updated_at"] = utc_now()
            updated = validate_record(self.model, data)

            await conn.execute(
                f"UPDATE {self.table} SET data_json = ?, updated_at = ? WHERE id = ?",
                (updated.model_dump_json(), utc_now().isoformat(), record_id),
            )

        logger.info(
            f"{self.table}_record_updated",
            record_id=record_id,
            fields=sorted(fields),
        )
        return updated

    async def remove(self, record_id: str) -> None:
        """Delete a record."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                f"DELETE FROM {self.table} WHERE id = ?", (record_id,)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(self.entity_name, record_id)
        logger.info(f"{self.table}_record_removed", record_id=record_id)

    async def list(self, filters: dict[str, Any] | None = None) -> list[T]:
        """List records, oldest first, optionally matching field equality filters."""
        if filters:
            check_update_fields(self.model, filters, protected=frozenset())

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT data_json FROM {self.table} ORDER BY created_at, rowid"
            )
            rows = await cursor.fetchall()

        records = [self._row_to_record(row) for row in rows]
        return [r for r in records if matches(r.model_dump(mode="json"), filters)]

    def _row_to_record(self, row: aiosqlite.Row) -> T:
        return self.model.model_validate_json(row["data_json"])
