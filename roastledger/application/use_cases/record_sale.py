"""Record Sale Use Case: ship sale lines out of stock."""

from dataclasses import dataclass
from datetime import date

from roastledger.application.dto.converters import ledger_entry_response, sale_response
from roastledger.application.dto.requests import RecordSaleRequest, SaleLineRequest
from roastledger.application.dto.responses import RecordSaleResponse
from roastledger.application.services import get_warehouse_ledger
from roastledger.config import get_logger
from roastledger.core.entities import LedgerEntry, Sale, SaleConsumption, SaleLine
from roastledger.core.interfaces import Repositories
from roastledger.core.services import WarehouseLedger

logger = get_logger(__name__)


@dataclass
class RecordSaleResult:
    sale: Sale
    entries: list[LedgerEntry]


class RecordSaleUseCase:
    """Store a sale and book one SaleConsumption entry per line, atomically."""

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

    async def execute(self, request: RecordSaleRequest) -> RecordSaleResult:
        """Execute record sale use case."""
        logger.info(
            "record_sale_started",
            invoice_number=request.invoice_number,
            lines=len(request.lines),
        )
        repos = self._get_repositories()
        ledger = self._get_ledger()
        sale_date = request.sale_date or date.today()

        async with repos.transactions.transaction():
            for line in request.lines:
                # Raises NotFoundError before anything is written
                await repos.stock.get(line.stock_item_id)

            sale = Sale(
                invoice_number=request.invoice_number,
                customer_name=request.customer_name,
                sale_date=sale_date,
                lines=[
                    SaleLine(
                        stock_item_id=line.stock_item_id,
                        quantity_kg=line.quantity_kg,
                        price_per_kg=line.price_per_kg,
                    )
                    for line in request.lines
                ],
                payment_status=request.payment_status,
                shipping_address=request.shipping_address,
                notes=request.notes,
            )
            sale_id = await repos.sales.create(sale)

            entries = []
            for line in sale.lines:
                entries.append(
                    await ledger.append(
                        line.stock_item_id,
                        -line.quantity_kg,
                        SaleConsumption(sale_id=sale_id),
                        entry_date=sale_date,
                    )
                )

        logger.info(
            "record_sale_complete",
            sale_id=sale_id,
            invoice_number=sale.invoice_number,
            total_amount=sale.total_amount,
        )
        return RecordSaleResult(sale=sale, entries=entries)

    async def execute_single(
        self,
        stock_item_id: str,
        quantity_kg: float,
        price_per_kg: float,
        invoice_number: str,
        customer_name: str,
        sale_date: date | None = None,
    ) -> RecordSaleResult:
        """Record a one-line sale."""
        return await self.execute(
            RecordSaleRequest(
                invoice_number=invoice_number,
                customer_name=customer_name,
                sale_date=sale_date,
                lines=[
                    SaleLineRequest(
                        stock_item_id=stock_item_id,
                        quantity_kg=quantity_kg,
                        price_per_kg=price_per_kg,
                    )
                ],
            )
        )

    def to_response(self, result: RecordSaleResult) -> RecordSaleResponse:
        """Convert result to API response."""
        return RecordSaleResponse(
            sale=sale_response(result.sale),
            entries=[ledger_entry_response(e) for e in result.entries],
        )
