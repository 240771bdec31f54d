"""Receive Purchase Use Case: green beans in against an approved purchase order."""

from dataclasses import dataclass

from roastledger.application.dto.converters import (
    ledger_entry_response,
    purchase_order_response,
    stock_item_response,
)
from roastledger.application.dto.requests import ReceivePurchaseRequest
from roastledger.application.dto.responses import ReceivePurchaseResponse
from roastledger.application.services import get_warehouse_ledger
from roastledger.config import get_logger, get_settings
from roastledger.core.entities import (
    LedgerEntry,
    OriginType,
    POStatus,
    PurchaseOrder,
    PurchaseReceipt,
    StockItem,
    StockKind,
)
from roastledger.core.exceptions import ValidationError
from roastledger.core.interfaces import ILedgerStore, Repositories
from roastledger.core.services import WarehouseLedger

logger = get_logger(__name__)


async def received_quantities(ledger_store: ILedgerStore, order: PurchaseOrder) -> list[float]:
    """Kilograms received so far on each line of a purchase order."""
    received = [0.0] * len(order.items)
    entries = await ledger_store.list_by_origin(OriginType.PURCHASE_RECEIPT, order.id)
    for entry in entries:
        index = entry.origin.line_item_index
        if index < len(received):
            received[index] += entry.delta
    return received


@dataclass
class ReceivePurchaseResult:
    """Result of receiving a purchase order line."""

    purchase_order: PurchaseOrder
    stock_item: StockItem
    entry: LedgerEntry
    received_kg: list[float]
    stock_item_created: bool = False
    order_completed: bool = False


class ReceivePurchaseUseCase:
    """
    Book green beans into stock against a purchase order line.

    The order must be approved and cumulative receipts may not exceed the
    ordered quantity of the line. Beans go to the green stock item for the
    line's variety at the receiving location, created if missing. The order
    is completed once every line is fully received.
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

    async def execute(self, request: ReceivePurchaseRequest) -> ReceivePurchaseResult:
        """Execute receive purchase use case."""
        logger.info(
            "receive_purchase_started",
            purchase_order_id=request.purchase_order_id,
            line_item_index=request.line_item_index,
            quantity_kg=request.quantity_kg,
        )
        settings = get_settings()
        tolerance = settings.valuation.quantity_tolerance
        repos = self._get_repositories()
        ledger = self._get_ledger()

        async with repos.transactions.transaction():
            # 1. Validate order state and line
            order = await repos.purchase_orders.get(request.purchase_order_id)
            if order.status != POStatus.APPROVED:
                raise ValidationError(
                    "status",
                    f"purchase order {order.id} is {order.status.value}; "
                    "only approved orders can be received",
                    order.status.value,
                )
            if request.line_item_index >= len(order.items):
                raise ValidationError(
                    "line_item_index",
                    f"purchase order {order.id} has {len(order.items)} line(s)",
                    request.line_item_index,
                )
            line = order.items[request.line_item_index]

            # 2. Over-receipt check
            received = await received_quantities(repos.ledger, order)
            remaining = line.quantity_kg - received[request.line_item_index]
            if request.quantity_kg > remaining + tolerance:
                raise ValidationError(
                    "quantity_kg",
                    f"only {remaining:g} kg left to receive on line {request.line_item_index}",
                    request.quantity_kg,
                )

            # 3. Find or create the green stock item
            location = request.location or settings.warehouse.green_bean_location
            item = await repos.stock.find(StockKind.GREEN_BEAN, line.variety, location)
            created = item is None
            if item is None:
                stock_item_id = await repos.stock.create(
                    StockItem(kind=StockKind.GREEN_BEAN, variety=line.variety, location=location)
                )
            else:
                stock_item_id = item.id

            # 4. Ledger entry
            entry = await ledger.append(
                stock_item_id,
                request.quantity_kg,
                PurchaseReceipt(
                    purchase_order_id=order.id,
                    line_item_index=request.line_item_index,
                ),
                entry_date=request.receipt_date,
            )
            received[request.line_item_index] += request.quantity_kg

            # 5. Complete the order when every line is in
            completed = all(
                received[i] >= item_line.quantity_kg - tolerance
                for i, item_line in enumerate(order.items)
            )
            if completed:
                order = await repos.purchase_orders.update(
                    order.id, {"status": POStatus.COMPLETED}
                )

            stock_item = await repos.stock.get(stock_item_id)

        logger.info(
            "receive_purchase_complete",
            purchase_order_id=order.id,
            stock_item_id=stock_item_id,
            entry_id=entry.id,
            order_completed=completed,
        )
        return ReceivePurchaseResult(
            purchase_order=order,
            stock_item=stock_item,
            entry=entry,
            received_kg=received,
            stock_item_created=created,
            order_completed=completed,
        )

    def to_response(self, result: ReceivePurchaseResult) -> ReceivePurchaseResponse:
        """Convert result to API response."""
        return ReceivePurchaseResponse(
            purchase_order=purchase_order_response(result.purchase_order, result.received_kg),
            stock_item=stock_item_response(result.stock_item),
            entry=ledger_entry_response(result.entry),
            stock_item_created=result.stock_item_created,
            order_completed=result.order_completed,
        )
