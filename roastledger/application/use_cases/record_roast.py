"""Record Roast Use Case: green beans in, roasted beans out."""

import time
from dataclasses import dataclass
from datetime import date

from roastledger.application.dto.converters import (
    ledger_entry_response,
    roast_event_response,
    stock_item_response,
)
from roastledger.application.dto.requests import RecordRoastRequest
from roastledger.application.dto.responses import RecordRoastResponse
from roastledger.application.services import get_warehouse_ledger
from roastledger.config import get_logger, get_settings
from roastledger.core.entities import (
    BeanVariety,
    LedgerEntry,
    RoastConsumption,
    RoastEvent,
    RoastInput,
    RoastOutput,
    StockItem,
    StockKind,
)
from roastledger.core.exceptions import ValidationError
from roastledger.core.interfaces import Repositories
from roastledger.core.services import WarehouseLedger

logger = get_logger(__name__)


@dataclass
class RecordRoastResult:
    roast: RoastEvent
    output_stock_item: StockItem
    entries: list[LedgerEntry]


class RecordRoastUseCase:
    """
    Record an in-house or toll roast.

    Consumes each green input, then books the output into the roasted stock
    item for the variety at the target location (found or created). Inputs of
    different varieties produce BLEND output. The roast event and all ledger
    entries are written in one transaction.
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

    async def execute(self, request: RecordRoastRequest) -> RecordRoastResult:
        """Execute record roast use case."""
        total_input = sum(i.weight_kg for i in request.inputs)
        logger.info(
            "record_roast_started",
            inputs=len(request.inputs),
            input_kg=total_input,
            output_kg=request.output_weight_kg,
            external_roastery=request.external_roastery,
        )
        if request.output_weight_kg > total_input:
            raise ValidationError(
                "output_weight_kg",
                f"roasted weight cannot exceed green input of {total_input:g} kg",
                request.output_weight_kg,
            )

        settings = get_settings()
        repos = self._get_repositories()
        ledger = self._get_ledger()
        roast_date = request.roast_date or date.today()

        async with repos.transactions.transaction():
            # 1. Inputs must be green beans
            varieties = set()
            for roast_input in request.inputs:
                item = await repos.stock.get(roast_input.stock_item_id)
                if item.kind != StockKind.GREEN_BEAN:
                    raise ValidationError(
                        "inputs",
                        f"stock item {item.id} is {item.kind.value}; roasting needs green beans",
                        item.id,
                    )
                varieties.add(item.variety)

            # 2. Roasted output item, merged per variety and location
            variety = varieties.pop() if len(varieties) == 1 else BeanVariety.BLEND
            location = request.location or settings.warehouse.roasted_bean_location
            output = await repos.stock.find(StockKind.ROASTED_BEAN, variety, location)
            if output is None:
                output_id = await repos.stock.create(
                    StockItem(kind=StockKind.ROASTED_BEAN, variety=variety, location=location)
                )
            else:
                output_id = output.id

            # 3. Roast event
            roast = RoastEvent(
                batch_id=f"RB-{int(time.time() * 1000)}",
                roast_date=roast_date,
                inputs=[
                    RoastInput(stock_item_id=i.stock_item_id, weight_kg=i.weight_kg)
                    for i in request.inputs
                ],
                output_stock_item_id=output_id,
                output_weight_kg=request.output_weight_kg,
                operational_cost_per_kg=request.operational_cost_per_kg,
                roaster_name=request.roaster_name,
                external_roastery=request.external_roastery,
                notes=request.notes,
            )
            roast_id = await repos.roasts.create(roast)

            # 4. Consume inputs, then book the output
            entries = []
            for roast_input in roast.inputs:
                entries.append(
                    await ledger.append(
                        roast_input.stock_item_id,
                        -roast_input.weight_kg,
                        RoastConsumption(roast_event_id=roast_id),
                        entry_date=roast_date,
                    )
                )
            entries.append(
                await ledger.append(
                    output_id,
                    request.output_weight_kg,
                    RoastOutput(roast_event_id=roast_id),
                    entry_date=roast_date,
                )
            )
            output_item = await repos.stock.get(output_id)

        logger.info(
            "record_roast_complete",
            roast_event_id=roast_id,
            batch_id=roast.batch_id,
            output_stock_item_id=output_id,
            yield_ratio=round(roast.yield_ratio, 4),
        )
        return RecordRoastResult(roast=roast, output_stock_item=output_item, entries=entries)

    def to_response(self, result: RecordRoastResult) -> RecordRoastResponse:
        """Convert result to API response."""
        return RecordRoastResponse(
            roast=roast_event_response(result.roast),
            output_stock_item=stock_item_response(result.output_stock_item),
            entries=[ledger_entry_response(e) for e in result.entries],
        )
