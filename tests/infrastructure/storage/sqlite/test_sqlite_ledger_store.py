"""Tests for SQLiteLedgerStore and SQLite transactions."""

import asyncio
import sqlite3
from datetime import date

import aiosqlite
import pytest

from roastledger.core.entities import (
    LedgerEntry,
    ManualAdjustment,
    OriginType,
    PurchaseReceipt,
    SaleConsumption,
    Supplier,
)
from roastledger.core.exceptions import InsufficientStockError, NotFoundError


def _entry(stock_item_id: str, delta: float, origin=None, **kwargs) -> LedgerEntry:
    return LedgerEntry(
        stock_item_id=stock_item_id,
        delta=delta,
        origin=origin or ManualAdjustment(reason="count"),
        **kwargs,
    )


class TestAppend:
    async def test_append_updates_stock_item(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()

        entry = await sqlite_repos.ledger.append(
            _entry(stock_id, 40, PurchaseReceipt(purchase_order_id="PO1", line_item_index=0))
        )

        item = await sqlite_repos.stock.get(stock_id)
        assert entry.id is not None
        assert item.quantity_kg == 40
        assert item.version == 1

        stored = (await sqlite_repos.ledger.list_for_stock_item(stock_id))[0]
        assert stored.origin == PurchaseReceipt(purchase_order_id="PO1", line_item_index=0)
        assert stored.origin_type == OriginType.PURCHASE_RECEIPT

    async def test_insufficient_stock_writes_nothing(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_repos.ledger.append(_entry(stock_id, 5))

        with pytest.raises(InsufficientStockError) as exc_info:
            await sqlite_repos.ledger.append(_entry(stock_id, -8, SaleConsumption(sale_id="SL1")))

        assert exc_info.value.details["available"] == 5
        assert (await sqlite_repos.stock.get(stock_id)).quantity_kg == 5
        assert len(await sqlite_repos.ledger.list_for_stock_item(stock_id)) == 1

    async def test_allow_negative(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()

        await sqlite_repos.ledger.append(
            _entry(stock_id, -2, correcting=True), allow_negative=True
        )

        assert (await sqlite_repos.stock.get(stock_id)).quantity_kg == -2
        assert (await sqlite_repos.ledger.list_for_stock_item(stock_id))[0].correcting is True

    async def test_unknown_stock_item(self, sqlite_repos):
        with pytest.raises(NotFoundError):
            await sqlite_repos.ledger.append(_entry("ST-missing", 1))

    async def test_concurrent_outbound_cannot_overdraw(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_repos.ledger.append(_entry(stock_id, 10))

        results = await asyncio.gather(
            sqlite_repos.ledger.append(_entry(stock_id, -6, SaleConsumption(sale_id="SL1"))),
            sqlite_repos.ledger.append(_entry(stock_id, -6, SaleConsumption(sale_id="SL2"))),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(failures) == 1
        assert (await sqlite_repos.stock.get(stock_id)).quantity_kg == 4
        assert await sqlite_repos.ledger.balance(stock_id) == 4


class TestImmutability:
    async def test_entries_cannot_be_updated(self, sqlite_db, sqlite_scenario):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_scenario.ledger.adjust(stock_id, 5, reason="count")

        async with aiosqlite.connect(sqlite_db) as conn:
            with pytest.raises(sqlite3.DatabaseError, match="immutable"):
                await conn.execute("UPDATE ledger_entries SET delta = 50")

    async def test_entries_cannot_be_deleted(self, sqlite_db, sqlite_scenario):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_scenario.ledger.adjust(stock_id, 5, reason="count")

        async with aiosqlite.connect(sqlite_db) as conn:
            with pytest.raises(sqlite3.DatabaseError, match="immutable"):
                await conn.execute("DELETE FROM ledger_entries")


class TestQueries:
    async def test_list_before_entry(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        first = await sqlite_repos.ledger.append(_entry(stock_id, 1))
        second = await sqlite_repos.ledger.append(_entry(stock_id, 2))
        await sqlite_repos.ledger.append(_entry(stock_id, 3))

        earlier = await sqlite_repos.ledger.list_for_stock_item(stock_id, second.id)

        assert [e.id for e in earlier] == [first.id]

    async def test_list_by_origin(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_repos.ledger.append(_entry(stock_id, 10))
        await sqlite_repos.ledger.append(_entry(stock_id, -2, SaleConsumption(sale_id="SL1")))
        await sqlite_repos.ledger.append(_entry(stock_id, -3, SaleConsumption(sale_id="SL2")))

        entries = await sqlite_repos.ledger.list_by_origin(OriginType.SALE_CONSUMPTION, "SL2")

        assert [e.delta for e in entries] == [-3]

    async def test_list_entries_by_date_and_type(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_repos.ledger.append(_entry(stock_id, 10, entry_date=date(2026, 1, 5)))
        await sqlite_repos.ledger.append(
            _entry(stock_id, -2, SaleConsumption(sale_id="SL1"), entry_date=date(2026, 1, 20))
        )
        await sqlite_repos.ledger.append(
            _entry(stock_id, -3, SaleConsumption(sale_id="SL2"), entry_date=date(2026, 2, 1))
        )

        january_sales = await sqlite_repos.ledger.list_entries(
            date(2026, 1, 1), date(2026, 1, 31), OriginType.SALE_CONSUMPTION
        )
        from_february = await sqlite_repos.ledger.list_entries(start_date=date(2026, 2, 1))

        assert [e.delta for e in january_sales] == [-2]
        assert [e.delta for e in from_february] == [-3]
        assert len(await sqlite_repos.ledger.list_entries()) == 3


class TestTransactions:
    async def test_rollback_discards_all_writes(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()

        with pytest.raises(RuntimeError):
            async with sqlite_repos.transactions.transaction():
                await sqlite_repos.suppliers.create(Supplier(name="Koperasi Gayo"))
                await sqlite_repos.ledger.append(_entry(stock_id, 5))
                raise RuntimeError("boom")

        assert await sqlite_repos.suppliers.list() == []
        assert (await sqlite_repos.stock.get(stock_id)).quantity_kg == 0
        assert await sqlite_repos.ledger.list_for_stock_item(stock_id) == []

    async def test_reads_inside_transaction_see_own_writes(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()

        async with sqlite_repos.transactions.transaction():
            await sqlite_repos.ledger.append(_entry(stock_id, 5))
            inside = await sqlite_repos.stock.get(stock_id)

        assert inside.quantity_kg == 5

    async def test_failed_append_inside_transaction_rolls_back_earlier_writes(
        self, sqlite_scenario, sqlite_repos
    ):
        first = await sqlite_scenario.stock_item()
        second = await sqlite_scenario.stock_item(location="Toko")
        await sqlite_repos.ledger.append(_entry(first, 5))

        with pytest.raises(InsufficientStockError):
            async with sqlite_repos.transactions.transaction():
                await sqlite_repos.ledger.append(_entry(first, -5, SaleConsumption(sale_id="S")))
                await sqlite_repos.ledger.append(_entry(second, -1, SaleConsumption(sale_id="S")))

        assert (await sqlite_repos.stock.get(first)).quantity_kg == 5
