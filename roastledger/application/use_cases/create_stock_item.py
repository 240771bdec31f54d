"""Create Stock Item Use Case: register a stock item with optional opening stock."""

from dataclasses import dataclass

from roastledger.application.dto.converters import (
    ledger_entry_response,
    stock_item_response,
)
from roastledger.application.dto.requests import CreateStockItemRequest
from roastledger.application.dto.responses import StockMutationResponse
from roastledger.application.services import get_warehouse_ledger
from roastledger.config import get_logger
from roastledger.core.entities import LedgerEntry, StockItem
from roastledger.core.interfaces import Repositories
from roastledger.core.services import WarehouseLedger

logger = get_logger(__name__)


@dataclass
class CreateStockItemResult:
    """Result of creating a stock item."""

    stock_item: StockItem
    opening_entry: LedgerEntry | None = None


class CreateStockItemUseCase:
    """
    Create a stock item at zero, then book any opening quantity.

    The opening quantity is a ManualAdjustment so the quantity still equals
    the ledger sum. Both writes share one transaction.
    """

    def __init__(
        self,
        repositories: Repositories | None = None,
        warehouse_ledger: WarehouseLedger | None = None,
    ):
        self._repositories = repositories
        self._ledger = warehouse_ledger

    def _get_repositories(self) -> Repositories:
        if self._repositories is None:
            from roastledger.infrastructure.storage import get_repositories

            self._repositories = get_repositories()
        return self._repositories

    def _get_ledger(self) -> WarehouseLedger:
        if self._ledger is None:
            self._ledger = get_warehouse_ledger(self._repositories)
        return self._ledger

    async def execute(self, request: CreateStockItemRequest) -> CreateStockItemResult:
        """Execute create stock item use case."""
        repos = self._get_repositories()
        ledger = self._get_ledger()

        async with repos.transactions.transaction():
            item = StockItem(
                kind=request.kind,
                variety=request.variety,
                location=request.location,
            )
            stock_item_id = await repos.stock.create(item)

            entry = None
            if request.initial_quantity_kg > 0:
                entry = await ledger.adjust(
                    stock_item_id,
                    request.initial_quantity_kg,
                    reason=request.reason,
                    unit_cost=request.unit_cost,
                )
            item = await repos.stock.get(stock_item_id)

        logger.info(
            "stock_item_registered",
            stock_item_id=stock_item_id,
            opening_kg=request.initial_quantity_kg,
        )
        return CreateStockItemResult(stock_item=item, opening_entry=entry)

    def to_response(self, result: CreateStockItemResult) -> StockMutationResponse:
        """Convert result to API response."""
        return StockMutationResponse(
            stock_item=stock_item_response(result.stock_item),
            entry=ledger_entry_response(result.opening_entry) if result.opening_entry else None,
        )
