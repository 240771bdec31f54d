"""In-memory implementations of the record, stock and ledger stores."""

from datetime import date
from typing import Any

from roastledger.config import get_logger, get_settings
from roastledger.core.entities.common import utc_now
from roastledger.core.entities.ledger import LedgerEntry, OriginType
from roastledger.core.entities.stock import BeanVariety, StockItem, StockKind
from roastledger.core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from roastledger.core.interfaces.ledger_store import ILedgerStore
from roastledger.core.interfaces.record_store import IRecordStore, IStockStore, T
from roastledger.infrastructure.storage.ids import generate_id
from roastledger.infrastructure.storage.memory.database import MemoryDatabase
from roastledger.infrastructure.storage.records import (
    check_update_fields,
    matches,
    validate_record,
)

logger = get_logger(__name__)

STOCK_TABLE = "stock_items"
LEDGER_FIELDS = frozenset({"id", "quantity_kg", "version", "last_updated"})


class MemoryRecordStore(IRecordStore[T]):
    """Records of one entity type kept as JSON-mode dicts, in insertion order."""

    def __init__(self, db: MemoryDatabase, table: str, model: type[T], id_prefix: str):
        self._db = db
        self.table = table
        self.model = model
        self.id_prefix = id_prefix
        self.entity_name = model.__name__

    async def create(self, record: T) -> str:
        if record.id is None:
            record.id = generate_id(self.id_prefix)
        validated = validate_record(self.model, record.model_dump())

        async with self._db.transaction():
            rows = self._db.table(self.table)
            if validated.id in rows:
                raise ValidationError("id", "record id already exists", validated.id)
            rows[validated.id] = validated.model_dump(mode="json")

        logger.debug(f"{self.table}_record_created", record_id=validated.id)
        return validated.id

    async def get(self, record_id: str) -> T:
        data = self._db.table(self.table).get(record_id)
        if data is None:
            raise NotFoundError(self.entity_name, record_id)
        return self.model.model_validate(data)

    async def update(self, record_id: str, fields: dict[str, Any]) -> T:
        check_update_fields(self.model, fields)

        async with self._db.transaction():
            current = await self.get(record_id)
            data = {**current.model_dump(), **fields}
            if "updated_at" in self.model.model_fields and "updated_at" not in fields:
                data["updated_at"] = utc_now()
            updated = validate_record(self.model, data)
            self._db.table(self.table)[record_id] = updated.model_dump(mode="json")

        logger.debug(f"{self.table}_record_updated", record_id=record_id)
        return updated

    async def remove(self, record_id: str) -> None:
        async with self._db.transaction():
            rows = self._db.table(self.table)
            if record_id not in rows:
                raise NotFoundError(self.entity_name, record_id)
            del rows[record_id]

    async def list(self, filters: dict[str, Any] | None = None) -> list[T]:
        if filters:
            check_update_fields(self.model, filters, protected=frozenset())
        return [
            self.model.model_validate(data)
            for data in self._db.table(self.table).values()
            if matches(data, filters)
        ]


class MemoryStockStore(MemoryRecordStore[StockItem], IStockStore):
    """Stock items; quantity only changes through MemoryLedgerStore.append."""

    def __init__(self, db: MemoryDatabase, quantity_tolerance: float | None = None):
        super().__init__(db, STOCK_TABLE, StockItem, "ST")
        if quantity_tolerance is None:
            quantity_tolerance = get_settings().valuation.quantity_tolerance
        self.quantity_tolerance = quantity_tolerance

    async def create(self, record: StockItem) -> str:
        if record.quantity_kg != 0:
            raise ValidationError(
                "quantity_kg",
                "new stock items start at zero; record stock with a ledger entry",
                record.quantity_kg,
            )
        record.version = 0
        return await super().create(record)

    async def update(self, record_id: str, fields: dict[str, Any]) -> StockItem:
        check_update_fields(StockItem, fields, protected=LEDGER_FIELDS)
        async with self._db.transaction():
            current = await self.get(record_id)
            updated = validate_record(StockItem, {**current.model_dump(), **fields})
            self._db.table(self.table)[record_id] = updated.model_dump(mode="json")
        return updated

    async def remove(self, record_id: str) -> None:
        async with self._db.transaction():
            item = await self.get(record_id)
            if abs(item.quantity_kg) > self.quantity_tolerance:
                raise ValidationError(
                    "quantity_kg",
                    "stock item still holds stock; adjust it to zero first",
                    item.quantity_kg,
                )
            del self._db.table(self.table)[record_id]

    async def find(
        self, kind: StockKind, variety: BeanVariety, location: str
    ) -> StockItem | None:
        for data in self._db.table(self.table).values():
            if matches(data, {"kind": kind, "variety": variety, "location": location}):
                return StockItem.model_validate(data)
        return None


class MemoryLedgerStore(ILedgerStore):
    """Append-only ledger list sharing a MemoryDatabase with the stock store."""

    def __init__(self, db: MemoryDatabase, quantity_tolerance: float | None = None):
        self._db = db
        if quantity_tolerance is None:
            quantity_tolerance = get_settings().valuation.quantity_tolerance
        self.quantity_tolerance = quantity_tolerance

    async def append(
        self, entry: LedgerEntry, allow_negative: bool = False
    ) -> LedgerEntry:
        async with self._db.transaction():
            stock = self._db.table(STOCK_TABLE).get(entry.stock_item_id)
            if stock is None:
                raise NotFoundError("StockItem", entry.stock_item_id)

            new_quantity = stock["quantity_kg"] + entry.delta
            if not allow_negative and new_quantity < -self.quantity_tolerance:
                raise InsufficientStockError(
                    entry.stock_item_id,
                    requested=-entry.delta,
                    available=stock["quantity_kg"],
                )

            stock["quantity_kg"] = new_quantity
            stock["version"] += 1
            stock["last_updated"] = utc_now().isoformat()

            stored = entry.model_copy(update={"id": self._db.next_entry_id})
            self._db.next_entry_id += 1
            self._db.ledger.append(stored.model_dump(mode="json"))

        logger.debug(
            "ledger_entry_appended",
            entry_id=stored.id,
            stock_item_id=stored.stock_item_id,
            delta=stored.delta,
            origin_type=stored.origin_type.value,
        )
        return stored

    def _entries(self) -> list[LedgerEntry]:
        return [LedgerEntry.model_validate(data) for data in self._db.ledger]

    async def list_for_stock_item(
        self, stock_item_id: str, before_entry_id: int | None = None
    ) -> list[LedgerEntry]:
        return [
            e
            for e in self._entries()
            if e.stock_item_id == stock_item_id
            and (before_entry_id is None or e.id < before_entry_id)
        ]

    async def list_by_origin(
        self, origin_type: OriginType, origin_id: str
    ) -> list[LedgerEntry]:
        return [
            e
            for e in self._entries()
            if e.origin_type == origin_type and e.origin.origin_id == origin_id
        ]

    async def list_entries(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        origin_type: OriginType | None = None,
    ) -> list[LedgerEntry]:
        return [
            e
            for e in self._entries()
            if (start_date is None or e.entry_date >= start_date)
            and (end_date is None or e.entry_date <= end_date)
            and (origin_type is None or e.origin_type == origin_type)
        ]

    async def balance(self, stock_item_id: str) -> float:
        return sum(
            data["delta"]
            for data in self._db.ledger
            if data["stock_item_id"] == stock_item_id
        )
