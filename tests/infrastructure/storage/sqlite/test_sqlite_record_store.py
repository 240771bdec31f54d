"""Tests for SQLiteRecordStore and SQLiteStockStore."""

from datetime import date

import pytest

from roastledger.core.entities import (
    BeanVariety,
    Expense,
    ExpenseCategory,
    PaymentStatus,
    Sale,
    SaleLine,
    StockItem,
    StockKind,
    Supplier,
)
from roastledger.core.exceptions import NotFoundError, ValidationError


class TestSQLiteRecordStore:
    async def test_create_and_get(self, sqlite_repos):
        supplier = Supplier(
            name="Koperasi Gayo",
            origin="Aceh Gayo, Indonesia",
            specialties=[BeanVariety.ARABICA],
        )

        supplier_id = await sqlite_repos.suppliers.create(supplier)
        stored = await sqlite_repos.suppliers.get(supplier_id)

        assert supplier.id == supplier_id
        assert stored.name == "Koperasi Gayo"
        assert stored.specialties == [BeanVariety.ARABICA]

    async def test_nested_models_round_trip(self, sqlite_repos):
        sale_id = await sqlite_repos.sales.create(
            Sale(
                invoice_number="INV-1",
                customer_name="Kopi Kenangan",
                sale_date=date(2026, 1, 10),
                lines=[SaleLine(stock_item_id="ST1", quantity_kg=2, price_per_kg=450_000)],
            )
        )

        sale = await sqlite_repos.sales.get(sale_id)

        assert sale.sale_date == date(2026, 1, 10)
        assert sale.total_amount == 900_000
        assert sale.payment_status == PaymentStatus.UNPAID

    async def test_duplicate_id(self, sqlite_repos):
        await sqlite_repos.suppliers.create(Supplier(id="SP1", name="A"))
        with pytest.raises(ValidationError):
            await sqlite_repos.suppliers.create(Supplier(id="SP1", name="B"))

    async def test_get_missing(self, sqlite_repos):
        with pytest.raises(NotFoundError):
            await sqlite_repos.suppliers.get("SP-missing")

    async def test_update(self, sqlite_repos):
        sale_id = await sqlite_repos.sales.create(
            Sale(
                invoice_number="INV-1",
                customer_name="Kopi Kenangan",
                lines=[SaleLine(stock_item_id="ST1", quantity_kg=2, price_per_kg=450_000)],
            )
        )

        updated = await sqlite_repos.sales.update(
            sale_id, {"payment_status": PaymentStatus.PAID}
        )

        assert updated.payment_status == PaymentStatus.PAID
        assert (await sqlite_repos.sales.get(sale_id)).payment_status == PaymentStatus.PAID

    @pytest.mark.parametrize("fields", [{"id": "SP2"}, {"colour": "red"}, {"name": ""}])
    async def test_update_rejected(self, sqlite_repos, fields):
        supplier_id = await sqlite_repos.suppliers.create(Supplier(name="Koperasi Gayo"))
        with pytest.raises(ValidationError):
            await sqlite_repos.suppliers.update(supplier_id, fields)

    async def test_update_missing(self, sqlite_repos):
        with pytest.raises(NotFoundError):
            await sqlite_repos.suppliers.update("SP-missing", {"phone": "1"})

    async def test_remove(self, sqlite_repos):
        supplier_id = await sqlite_repos.suppliers.create(Supplier(name="Koperasi Gayo"))

        await sqlite_repos.suppliers.remove(supplier_id)

        with pytest.raises(NotFoundError):
            await sqlite_repos.suppliers.remove(supplier_id)

    async def test_list_oldest_first_with_filters(self, sqlite_repos):
        for description, category in [
            ("Listrik", ExpenseCategory.UTILITIES),
            ("Gaji roaster", ExpenseCategory.SALARY),
            ("Air", ExpenseCategory.UTILITIES),
        ]:
            await sqlite_repos.expenses.create(
                Expense(description=description, amount=100_000, category=category)
            )

        everything = await sqlite_repos.expenses.list()
        utilities = await sqlite_repos.expenses.list({"category": ExpenseCategory.UTILITIES})

        assert [e.description for e in everything] == ["Listrik", "Gaji roaster", "Air"]
        assert [e.description for e in utilities] == ["Listrik", "Air"]


class TestSQLiteStockStore:
    async def test_create_and_get(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item(variety=BeanVariety.ROBUSTA)

        item = await sqlite_repos.stock.get(stock_id)

        assert item.kind == StockKind.GREEN_BEAN
        assert item.variety == BeanVariety.ROBUSTA
        assert item.quantity_kg == 0
        assert item.version == 0

    async def test_new_item_must_be_empty(self, sqlite_repos):
        with pytest.raises(ValidationError):
            await sqlite_repos.stock.create(
                StockItem(
                    kind=StockKind.GREEN_BEAN,
                    variety=BeanVariety.ARABICA,
                    location="Gudang",
                    quantity_kg=1,
                )
            )

    async def test_quantity_is_read_only(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        with pytest.raises(ValidationError) as exc_info:
            await sqlite_repos.stock.update(stock_id, {"quantity_kg": 100})
        assert exc_info.value.details["field"] == "quantity_kg"

    async def test_relocate_keeps_quantity(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_scenario.ledger.adjust(stock_id, 5, reason="count")

        await sqlite_repos.stock.update(stock_id, {"location": "Gudang Takengon"})

        item = await sqlite_repos.stock.get(stock_id)
        assert item.location == "Gudang Takengon"
        assert item.quantity_kg == 5

    async def test_remove_only_when_empty(self, sqlite_scenario, sqlite_repos):
        stock_id = await sqlite_scenario.stock_item()
        await sqlite_scenario.ledger.adjust(stock_id, 5, reason="count")

        with pytest.raises(ValidationError):
            await sqlite_repos.stock.remove(stock_id)

        await sqlite_scenario.ledger.adjust(stock_id, -5, reason="count")
        await sqlite_repos.stock.remove(stock_id)

        with pytest.raises(NotFoundError):
            await sqlite_repos.stock.get(stock_id)
        assert await sqlite_repos.ledger.balance(stock_id) == 0
        assert len(await sqlite_repos.ledger.list_for_stock_item(stock_id)) == 2

    async def test_find_and_filter(self, sqlite_scenario, sqlite_repos):
        green = await sqlite_scenario.stock_item()
        roasted = await sqlite_scenario.stock_item(StockKind.ROASTED_BEAN)

        found = await sqlite_repos.stock.find(
            StockKind.ROASTED_BEAN, BeanVariety.ARABICA, "Gudang Roasted Bean"
        )
        greens = await sqlite_repos.stock.list({"kind": StockKind.GREEN_BEAN})

        assert found.id == roasted
        assert [i.id for i in greens] == [green]
        assert await sqlite_repos.stock.find(
            StockKind.ROASTED_BEAN, BeanVariety.LIBERICA, "Gudang Roasted Bean"
        ) is None
