"""Purchase order use cases: creation and status lifecycle."""

from datetime import date

from roastledger.application.dto.converters import purchase_order_response
from roastledger.application.dto.requests import (
    CreatePurchaseOrderRequest,
    UpdatePurchaseOrderStatusRequest,
)
from roastledger.application.dto.responses import PurchaseOrderResponse
from roastledger.application.use_cases.receive_purchase import received_quantities
from roastledger.config import get_logger
from roastledger.core.entities import PurchaseLineItem, PurchaseOrder
from roastledger.core.exceptions import InvalidStatusTransitionError
from roastledger.core.interfaces import Repositories

logger = get_logger(__name__)


class _PurchaseOrderUseCase:
    def __init__(self, repositories: Repositories | None = None):
        self._repositories = repositories

    def _get_repositories(self) -> Repositories:
        if self._repositories is None:
            from roastledger.infrastructure.storage import get_repositories

            self._repositories = get_repositories()
        return self._repositories

    async def to_response(self, order: PurchaseOrder) -> PurchaseOrderResponse:
        """Convert an order to API response, with receipt progress per line."""
        received = await received_quantities(self._get_repositories().ledger, order)
        return purchase_order_response(order, received)


class CreatePurchaseOrderUseCase(_PurchaseOrderUseCase):
    """Create a pending purchase order for a known supplier."""

    async def execute(self, request: CreatePurchaseOrderRequest) -> PurchaseOrder:
        repos = self._get_repositories()

        # Raises NotFoundError for an unknown supplier
        await repos.suppliers.get(request.supplier_id)

        order = PurchaseOrder(
            supplier_id=request.supplier_id,
            order_date=request.order_date or date.today(),
            expected_delivery_date=request.expected_delivery_date,
            items=[
                PurchaseLineItem(
                    variety=item.variety,
                    quantity_kg=item.quantity_kg,
                    price_per_kg=item.price_per_kg,
                )
                for item in request.items
            ],
            notes=request.notes,
        )
        order_id = await repos.purchase_orders.create(order)

        logger.info(
            "purchase_order_created",
            purchase_order_id=order_id,
            supplier_id=request.supplier_id,
            lines=len(order.items),
            total_amount=order.total_amount,
        )
        return await repos.purchase_orders.get(order_id)


class UpdatePurchaseOrderStatusUseCase(_PurchaseOrderUseCase):
    """Move a purchase order to a new status; the lifecycle never goes backwards."""

    async def execute(
        self, purchase_order_id: str, request: UpdatePurchaseOrderStatusRequest
    ) -> PurchaseOrder:
        repos = self._get_repositories()

        async with repos.transactions.transaction():
            order = await repos.purchase_orders.get(purchase_order_id)
            if not order.can_transition_to(request.status):
                raise InvalidStatusTransitionError(
                    purchase_order_id, order.status.value, request.status.value
                )
            updated = await repos.purchase_orders.update(
                purchase_order_id, {"status": request.status}
            )

        logger.info(
            "purchase_order_status_changed",
            purchase_order_id=purchase_order_id,
            from_status=order.status.value,
            to_status=request.status.value,
        )
        return updated
