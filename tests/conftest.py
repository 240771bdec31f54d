"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio

from roastledger.application.services import reset_services
from roastledger.config import get_settings, reset_settings
from roastledger.core.entities import (
    BeanVariety,
    BlendComponent,
    BlendConsumption,
    BlendEvent,
    BlendOutput,
    PaymentStatus,
    POStatus,
    PurchaseLineItem,
    PurchaseOrder,
    PurchaseReceipt,
    RoastConsumption,
    RoastEvent,
    RoastInput,
    RoastOutput,
    Sale,
    SaleConsumption,
    SaleLine,
    StockItem,
    StockKind,
    Supplier,
)
from roastledger.core.interfaces import Repositories
from roastledger.core.services import LineageResolver, WarehouseLedger
from roastledger.infrastructure.storage import reset_repositories
from roastledger.infrastructure.storage.memory import create_memory_repositories
from roastledger.infrastructure.storage.sqlite import close_pool, create_sqlite_repositories
from roastledger.infrastructure.storage.sqlite import connection as conn_module
from roastledger.infrastructure.storage.sqlite.migrations.migrator import (
    initialize_database,
)

GREEN_LOCATION = "Gudang Green Bean"
ROASTED_LOCATION = "Gudang Roasted Bean"


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Memory backend and a private data dir for every test; no shared singletons."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    reset_repositories()
    reset_services()
    conn_module._pool = None
    yield
    reset_settings()
    reset_repositories()
    reset_services()
    conn_module._pool = None


class Scenario:
    """
    Builds ledger histories straight through the stores and the warehouse ledger.

    Skips the use case checks (order status, stock kinds) so tests can set up
    the exact lineage they need, including broken ones.
    """

    def __init__(self, repos: Repositories):
        self.repos = repos
        self.ledger = WarehouseLedger(repos.ledger, repos.stock)

    async def stock_item(
        self,
        kind: StockKind = StockKind.GREEN_BEAN,
        variety: BeanVariety = BeanVariety.ARABICA,
        location: str | None = None,
    ) -> str:
        if location is None:
            location = GREEN_LOCATION if kind == StockKind.GREEN_BEAN else ROASTED_LOCATION
        return await self.repos.stock.create(
            StockItem(kind=kind, variety=variety, location=location)
        )

    async def purchase(
        self,
        quantity_kg: float,
        price_per_kg: float,
        variety: BeanVariety = BeanVariety.ARABICA,
        stock_item_id: str | None = None,
    ) -> tuple[str, str]:
        """Receive a fully delivered one-line order. Returns (stock_item_id, order_id)."""
        supplier_id = await self.repos.suppliers.create(Supplier(name="Koperasi Gayo"))
        order_id = await self.repos.purchase_orders.create(
            PurchaseOrder(
                supplier_id=supplier_id,
                items=[
                    PurchaseLineItem(
                        variety=variety, quantity_kg=quantity_kg, price_per_kg=price_per_kg
                    )
                ],
                status=POStatus.COMPLETED,
            )
        )
        if stock_item_id is None:
            stock_item_id = await self.stock_item(StockKind.GREEN_BEAN, variety)
        await self.ledger.append(
            stock_item_id,
            quantity_kg,
            PurchaseReceipt(purchase_order_id=order_id, line_item_index=0),
        )
        return stock_item_id, order_id

    async def roast(
        self,
        inputs: list[tuple[str, float]],
        output_kg: float,
        operational_cost_per_kg: float = 0.0,
        variety: BeanVariety = BeanVariety.ARABICA,
        output_stock_item_id: str | None = None,
    ) -> tuple[str, str]:
        """Consume green inputs and book roasted output. Returns (stock_item_id, roast_id)."""
        if output_stock_item_id is None:
            output_stock_item_id = await self.stock_item(StockKind.ROASTED_BEAN, variety)
        roast_id = await self.repos.roasts.create(
            RoastEvent(
                batch_id="RB-TEST",
                inputs=[RoastInput(stock_item_id=i, weight_kg=w) for i, w in inputs],
                output_stock_item_id=output_stock_item_id,
                output_weight_kg=output_kg,
                operational_cost_per_kg=operational_cost_per_kg,
            )
        )
        for stock_item_id, weight in inputs:
            await self.ledger.append(
                stock_item_id, -weight, RoastConsumption(roast_event_id=roast_id)
            )
        await self.ledger.append(
            output_stock_item_id, output_kg, RoastOutput(roast_event_id=roast_id)
        )
        return output_stock_item_id, roast_id

    async def blend(
        self,
        components: list[tuple[str, float]],
        output_kg: float,
        quoted_cost_per_kg: float | None = None,
    ) -> tuple[str, str]:
        """Blend roasted components by percentage. Returns (stock_item_id, blend_id)."""
        output_id = await self.stock_item(StockKind.ROASTED_BEAN, BeanVariety.BLEND)
        blend = BlendEvent(
            name="House Blend",
            components=[
                BlendComponent(stock_item_id=i, percentage=pct) for i, pct in components
            ],
            output_stock_item_id=output_id,
            output_weight_kg=output_kg,
            quoted_cost_per_kg=quoted_cost_per_kg,
        )
        blend_id = await self.repos.blends.create(blend)
        for component in blend.components:
            await self.ledger.append(
                component.stock_item_id,
                -blend.component_weight(component),
                BlendConsumption(blend_event_id=blend_id),
            )
        await self.ledger.append(output_id, output_kg, BlendOutput(blend_event_id=blend_id))
        return output_id, blend_id

    async def sell(
        self,
        stock_item_id: str,
        quantity_kg: float,
        price_per_kg: float,
        sale_date: date | None = None,
        payment_status: PaymentStatus = PaymentStatus.UNPAID,
    ) -> str:
        sale = Sale(
            invoice_number="INV-TEST",
            customer_name="Kopi Kenangan",
            sale_date=sale_date or date.today(),
            lines=[
                SaleLine(
                    stock_item_id=stock_item_id,
                    quantity_kg=quantity_kg,
                    price_per_kg=price_per_kg,
                )
            ],
            payment_status=payment_status,
        )
        sale_id = await self.repos.sales.create(sale)
        await self.ledger.append(
            stock_item_id,
            -quantity_kg,
            SaleConsumption(sale_id=sale_id),
            entry_date=sale.sale_date,
        )
        return sale_id

    def resolver(self) -> LineageResolver:
        return LineageResolver(
            ledger_store=self.repos.ledger,
            purchase_order_store=self.repos.purchase_orders,
            roast_store=self.repos.roasts,
            blend_store=self.repos.blends,
        )


@pytest.fixture
def memory_repos() -> Repositories:
    """Fresh in-memory repositories."""
    return create_memory_repositories()


@pytest.fixture
def scenario(memory_repos: Repositories) -> Scenario:
    return Scenario(memory_repos)


@pytest_asyncio.fixture
async def sqlite_db(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Path, None]:
    """Migrated temporary database wired to the global connection pool."""
    monkeypatch.setenv("STORAGE_BACKEND", "sqlite")
    reset_settings()
    db_path = get_settings().storage.db_path
    await initialize_database(db_path, create_backup_before=False)
    try:
        yield db_path
    finally:
        await close_pool()


@pytest.fixture
def sqlite_repos(sqlite_db: Path) -> Repositories:
    return create_sqlite_repositories()


@pytest.fixture
def sqlite_scenario(sqlite_repos: Repositories) -> Scenario:
    return Scenario(sqlite_repos)
