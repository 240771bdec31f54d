"""
Lineage resolver.

Computes the cost basis of a stock item by walking the origin references of
its inbound ledger entries back to purchase receipts. Read-only.
"""

from roastledger.config import get_logger
from roastledger.core.entities import (
    BlendEvent,
    BlendOutput,
    CostBasis,
    LedgerEntry,
    LineageNode,
    ManualAdjustment,
    PurchaseOrder,
    PurchaseReceipt,
    RoastEvent,
    RoastOutput,
)
from roastledger.core.exceptions import (
    BrokenLineageError,
    CyclicLineageError,
    NotFoundError,
)
from roastledger.core.interfaces import ILedgerStore, IRecordStore

logger = get_logger(__name__)

# Priced node per ledger entry id, None for entries that carry no cost
Memo = dict[int | None, LineageNode | None]


class LineageResolver:
    """
    Moving-average cost per kg from ledger lineage.

    Priced inbound entries:
    - PurchaseReceipt: unit price of the referenced purchase order line
    - RoastOutput: input costs plus operational cost, spread over output weight
    - BlendOutput: component costs weighted by percentage
    - ManualAdjustment with unit_cost: that cost

    Entries are replayed in ledger order. Each priced inbound entry is averaged
    with the kilograms still on hand at the current cost; outbound entries
    reduce those kilograms and leave the cost unchanged. Once a stock item runs
    empty, earlier lots no longer count. Unpriced inbound entries (count
    corrections, reversed consumptions) carry quantity only.

    Inputs of a roast or blend are resolved as of the ledger position of the
    output entry, so later receipts into an input lot do not reprice earlier
    outputs.
    """

    DEFAULT_QUANTITY_TOLERANCE = 1e-6

    def __init__(
        self,
        ledger_store: ILedgerStore,
        purchase_order_store: IRecordStore[PurchaseOrder],
        roast_store: IRecordStore[RoastEvent],
        blend_store: IRecordStore[BlendEvent],
        quantity_tolerance: float | None = None,
    ):
        self._ledger = ledger_store
        self._purchase_orders = purchase_order_store
        self._roasts = roast_store
        self._blends = blend_store
        self._tolerance = (
            quantity_tolerance
            if quantity_tolerance is not None
            else self.DEFAULT_QUANTITY_TOLERANCE
        )

    async def resolve(
        self, stock_item_id: str, as_of_entry_id: int | None = None
    ) -> CostBasis:
        """
        Resolve the cost basis of a stock item.

        Args:
            stock_item_id: Stock item to price
            as_of_entry_id: Only entries before this ledger position count;
                None means the whole ledger

        Returns:
            CostBasis with the lineage tree of the priced entries in the
            current lot

        Raises:
            BrokenLineageError: dangling reference or nothing priced
            CyclicLineageError: the item appears in its own ancestry
        """
        memo: Memo = {}
        basis = await self._resolve(stock_item_id, as_of_entry_id, [], memo)
        logger.debug(
            "cost_basis_resolved",
            stock_item_id=stock_item_id,
            as_of_entry_id=as_of_entry_id,
            cost_per_kg=basis.cost_per_kg,
            priced_entries=len(memo),
        )
        return basis

    async def _resolve(
        self,
        stock_item_id: str,
        before_entry_id: int | None,
        visiting: list[str],
        memo: Memo,
    ) -> CostBasis:
        if stock_item_id in visiting:
            raise CyclicLineageError(stock_item_id, list(visiting))

        visiting.append(stock_item_id)
        try:
            entries = await self._ledger.list_for_stock_item(
                stock_item_id, before_entry_id
            )
            cost_per_kg: float | None = None
            valued_kg = 0.0
            nodes: list[LineageNode] = []
            for entry in self._current_lot(entries):
                if not entry.is_inbound:
                    valued_kg = max(valued_kg + entry.delta, 0.0)
                    continue
                node = await self._priced(entry, visiting, memo)
                if node is None:
                    continue
                if cost_per_kg is None or valued_kg <= self._tolerance:
                    cost_per_kg, valued_kg = node.cost_per_kg, node.quantity_kg
                else:
                    total_kg = valued_kg + node.quantity_kg
                    cost_per_kg = (
                        valued_kg * cost_per_kg + node.quantity_kg * node.cost_per_kg
                    ) / total_kg
                    valued_kg = total_kg
                nodes.append(node)
        finally:
            visiting.pop()

        if cost_per_kg is None:
            raise BrokenLineageError(
                stock_item_id,
                "no priced inbound ledger entries",
            )

        return CostBasis(
            stock_item_id=stock_item_id,
            cost_per_kg=cost_per_kg,
            priced_quantity_kg=valued_kg,
            as_of_entry_id=before_entry_id,
            lineage=nodes,
        )

    def _current_lot(self, entries: list[LedgerEntry]) -> list[LedgerEntry]:
        """Entries from the last inbound entry that arrived while the item was empty."""
        start = 0
        balance = 0.0
        for position, entry in enumerate(entries):
            if entry.is_inbound and balance <= self._tolerance:
                start = position
            balance += entry.delta
        return entries[start:]

    async def _priced(
        self,
        entry: LedgerEntry,
        visiting: list[str],
        memo: Memo,
    ) -> LineageNode | None:
        if entry.id in memo:
            return memo[entry.id]
        node = await self._price_entry(entry, visiting, memo)
        memo[entry.id] = node
        return node

    async def _price_entry(
        self,
        entry: LedgerEntry,
        visiting: list[str],
        memo: Memo,
    ) -> LineageNode | None:
        """Price one inbound entry, or None if it carries no cost."""
        origin = entry.origin

        if isinstance(origin, PurchaseReceipt):
            cost, sources = await self._price_receipt(entry, origin), []
        elif isinstance(origin, RoastOutput):
            cost, sources = await self._price_roast(entry, origin, visiting, memo)
        elif isinstance(origin, BlendOutput):
            cost, sources = await self._price_blend(entry, origin, visiting, memo)
        elif isinstance(origin, ManualAdjustment) and origin.unit_cost is not None:
            cost, sources = origin.unit_cost, []
        else:
            return None

        return LineageNode(
            stock_item_id=entry.stock_item_id,
            ledger_entry_id=entry.id,
            origin_type=entry.origin_type,
            origin_id=origin.origin_id,
            quantity_kg=entry.delta,
            cost_per_kg=cost,
            sources=sources,
        )

    async def _price_receipt(self, entry: LedgerEntry, origin: PurchaseReceipt) -> float:
        try:
            order = await self._purchase_orders.get(origin.purchase_order_id)
        except NotFoundError as e:
            raise BrokenLineageError(
                entry.stock_item_id,
                f"purchase order {origin.purchase_order_id} not found",
                entry.id,
            ) from e

        if origin.line_item_index >= len(order.items):
            raise BrokenLineageError(
                entry.stock_item_id,
                f"purchase order {order.id} has no line {origin.line_item_index}",
                entry.id,
            )
        return order.items[origin.line_item_index].price_per_kg

    async def _price_roast(
        self,
        entry: LedgerEntry,
        origin: RoastOutput,
        visiting: list[str],
        memo: Memo,
    ) -> tuple[float, list[LineageNode]]:
        try:
            roast = await self._roasts.get(origin.roast_event_id)
        except NotFoundError as e:
            raise BrokenLineageError(
                entry.stock_item_id,
                f"roast event {origin.roast_event_id} not found",
                entry.id,
            ) from e

        if roast.output_weight_kg <= 0:
            raise BrokenLineageError(
                entry.stock_item_id,
                f"roast event {roast.id} has no output weight",
                entry.id,
            )

        input_cost = 0.0
        sources: list[LineageNode] = []
        for roast_input in roast.inputs:
            basis = await self._resolve(roast_input.stock_item_id, entry.id, visiting, memo)
            input_cost += basis.cost_per_kg * roast_input.weight_kg
            sources.extend(basis.lineage)

        operational = roast.operational_cost_per_kg * roast.total_input_weight
        return (input_cost + operational) / roast.output_weight_kg, sources

    async def _price_blend(
        self,
        entry: LedgerEntry,
        origin: BlendOutput,
        visiting: list[str],
        memo: Memo,
    ) -> tuple[float, list[LineageNode]]:
        try:
            blend = await self._blends.get(origin.blend_event_id)
        except NotFoundError as e:
            raise BrokenLineageError(
                entry.stock_item_id,
                f"blend event {origin.blend_event_id} not found",
                entry.id,
            ) from e

        cost = 0.0
        sources: list[LineageNode] = []
        for component in blend.components:
            basis = await self._resolve(component.stock_item_id, entry.id, visiting, memo)
            cost += basis.cost_per_kg * component.percentage / 100
            sources.extend(basis.lineage)
        return cost, sources
