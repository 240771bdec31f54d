"""Adjust Stock Use Case: manual corrections through the ledger."""

from dataclasses import dataclass

from roastledger.application.dto.converters import (
    ledger_entry_response,
    stock_item_response,
)
from roastledger.application.dto.requests import AdjustStockRequest
from roastledger.application.dto.responses import StockMutationResponse
from roastledger.application.services import get_warehouse_ledger
from roastledger.config import get_logger
from roastledger.core.entities import LedgerEntry, StockItem
from roastledger.core.interfaces import Repositories
from roastledger.core.services import WarehouseLedger

logger = get_logger(__name__)


@dataclass
class AdjustStockResult:
    stock_item: StockItem
    entry: LedgerEntry


class AdjustStockUseCase:
    """Book a ManualAdjustment entry against a stock item."""

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

    async def execute(self, stock_item_id: str, request: AdjustStockRequest) -> AdjustStockResult:
        """Execute adjust stock use case."""
        logger.info(
            "adjust_stock_started",
            stock_item_id=stock_item_id,
            delta_kg=request.delta_kg,
            correcting=request.correcting,
        )
        repos = self._get_repositories()
        ledger = self._get_ledger()

        entry = await ledger.adjust(
            stock_item_id,
            request.delta_kg,
            reason=request.reason,
            unit_cost=request.unit_cost,
            correcting=request.correcting,
        )
        item = await repos.stock.get(stock_item_id)
        return AdjustStockResult(stock_item=item, entry=entry)

    def to_response(self, result: AdjustStockResult) -> StockMutationResponse:
        """Convert result to API response."""
        return StockMutationResponse(
            stock_item=stock_item_response(result.stock_item),
            entry=ledger_entry_response(result.entry),
        )
