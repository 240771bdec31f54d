"""Record Blend Use Case: roasted components in, new blend stock item out."""

from dataclasses import dataclass
from datetime import date

from roastledger.application.dto.converters import (
    blend_event_response,
    ledger_entry_response,
    stock_item_response,
)
from roastledger.application.dto.requests import RecordBlendRequest
from roastledger.application.dto.responses import RecordBlendResponse
from roastledger.application.services import get_valuation_engine, get_warehouse_ledger
from roastledger.config import get_logger, get_settings
from roastledger.core.entities import (
    BeanVariety,
    BlendComponent,
    BlendConsumption,
    BlendEvent,
    BlendOutput,
    LedgerEntry,
    StockItem,
    StockKind,
)
from roastledger.core.exceptions import ValidationError
from roastledger.core.interfaces import Repositories
from roastledger.core.services import ValuationEngine, WarehouseLedger

logger = get_logger(__name__)


@dataclass
class RecordBlendResult:
    blend: BlendEvent
    output_stock_item: StockItem
    entries: list[LedgerEntry]


class RecordBlendUseCase:
    """
    Produce a blend from roasted stock.

    Each component gives up output weight x percentage / 100 kg. The blend
    lands in a new BLEND stock item and its cost per kg is quoted from the
    components' lineage at creation time.
    """

    def __init__(
        self,
        repositories: Repositories | None = None,
        warehouse_ledger: WarehouseLedger | None = None,
        valuation_engine: ValuationEngine | None = None,
    ):
        self._repositories = repositories
        self._ledger = warehouse_ledger
        self._valuation = valuation_engine

    def _get_repositories(self) -> Repositories:
        if self._repositories is None:
            from roastledger.infrastructure.storage import get_repositories

            self._repositories = get_repositories()
        return self._repositories

    def _get_ledger(self) -> WarehouseLedger:
        if self._ledger is None:
            self._ledger = get_warehouse_ledger(self._repositories)
        return self._ledger

    def _get_valuation(self) -> ValuationEngine:
        if self._valuation is None:
            self._valuation = get_valuation_engine(self._repositories)
        return self._valuation

    async def execute(self, request: RecordBlendRequest) -> RecordBlendResult:
        """Execute record blend use case."""
        logger.info(
            "record_blend_started",
            name=request.name,
            components=len(request.components),
            output_kg=request.output_weight_kg,
        )
        ids = [c.stock_item_id for c in request.components]
        if len(ids) != len(set(ids)):
            raise ValidationError("components", "each stock item may appear only once", ids)

        settings = get_settings()
        repos = self._get_repositories()
        ledger = self._get_ledger()
        valuation = self._get_valuation()
        blend_date = request.blend_date or date.today()
        components = [
            BlendComponent(stock_item_id=c.stock_item_id, percentage=c.percentage)
            for c in request.components
        ]

        async with repos.transactions.transaction():
            # 1. Components must be roasted beans
            for component in components:
                item = await repos.stock.get(component.stock_item_id)
                if item.kind != StockKind.ROASTED_BEAN:
                    raise ValidationError(
                        "components",
                        f"stock item {item.id} is {item.kind.value}; blends use roasted beans",
                        item.id,
                    )

            # 2. Quote (also checks that percentages sum to 100)
            quoted = await valuation.price_blend(components)

            # 3. New blend stock item and event
            location = request.location or settings.warehouse.roasted_bean_location
            output_id = await repos.stock.create(
                StockItem(
                    kind=StockKind.ROASTED_BEAN,
                    variety=BeanVariety.BLEND,
                    location=location,
                )
            )
            blend = BlendEvent(
                name=request.name,
                blend_date=blend_date,
                components=components,
                output_stock_item_id=output_id,
                output_weight_kg=request.output_weight_kg,
                quoted_cost_per_kg=quoted,
                notes=request.notes,
            )
            blend_id = await repos.blends.create(blend)

            # 4. Consume components, then book the output
            entries = []
            for component in blend.components:
                entries.append(
                    await ledger.append(
                        component.stock_item_id,
                        -blend.component_weight(component),
                        BlendConsumption(blend_event_id=blend_id),
                        entry_date=blend_date,
                    )
                )
            entries.append(
                await ledger.append(
                    output_id,
                    request.output_weight_kg,
                    BlendOutput(blend_event_id=blend_id),
                    entry_date=blend_date,
                )
            )
            output_item = await repos.stock.get(output_id)

        logger.info(
            "record_blend_complete",
            blend_event_id=blend_id,
            output_stock_item_id=output_id,
            quoted_cost_per_kg=round(quoted, 2),
        )
        return RecordBlendResult(blend=blend, output_stock_item=output_item, entries=entries)

    def to_response(self, result: RecordBlendResult) -> RecordBlendResponse:
        """Convert result to API response."""
        return RecordBlendResponse(
            blend=blend_event_response(result.blend),
            output_stock_item=stock_item_response(result.output_stock_item),
            entries=[ledger_entry_response(e) for e in result.entries],
        )
