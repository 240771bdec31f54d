"""Tests for RecordRoastUseCase and RecordBlendUseCase."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from roastledger.application.dto.requests import (
    BlendComponentRequest,
    RecordBlendRequest,
    RecordRoastRequest,
    RoastInputRequest,
)
from roastledger.application.services import get_lineage_resolver
from roastledger.application.use_cases.record_blend import RecordBlendUseCase
from roastledger.application.use_cases.record_roast import RecordRoastUseCase
from roastledger.core.entities import BeanVariety, OriginType, StockKind
from roastledger.core.exceptions import (
    BrokenLineageError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)


def _roast(inputs: list[tuple[str, float]], output_kg: float, **kwargs) -> RecordRoastRequest:
    return RecordRoastRequest(
        inputs=[RoastInputRequest(stock_item_id=i, weight_kg=w) for i, w in inputs],
        output_weight_kg=output_kg,
        **kwargs,
    )


def _blend(components: list[tuple[str, float]], output_kg: float) -> RecordBlendRequest:
    return RecordBlendRequest(
        name="House Blend",
        components=[
            BlendComponentRequest(stock_item_id=i, percentage=pct) for i, pct in components
        ],
        output_weight_kg=output_kg,
    )


class TestRecordRoast:
    async def test_roast_moves_stock(self, scenario, memory_repos):
        green_id, _ = await scenario.purchase(100, 200_000)
        use_case = RecordRoastUseCase(memory_repos)

        result = await use_case.execute(
            _roast([(green_id, 100)], 85, operational_cost_per_kg=15_000, roaster_name="Budi")
        )

        assert (await memory_repos.stock.get(green_id)).quantity_kg == 0
        output = result.output_stock_item
        assert output.kind == StockKind.ROASTED_BEAN
        assert output.variety == BeanVariety.ARABICA
        assert output.location == "Gudang Roasted Bean"
        assert output.quantity_kg == 85
        assert result.roast.batch_id.startswith("RB-")
        assert result.roast.yield_ratio == pytest.approx(0.85)

    async def test_consumptions_precede_output(self, scenario, memory_repos):
        green_id, _ = await scenario.purchase(100, 200_000)

        result = await RecordRoastUseCase(memory_repos).execute(_roast([(green_id, 50)], 42))

        assert [e.origin_type for e in result.entries] == [
            OriginType.ROAST_CONSUMPTION,
            OriginType.ROAST_OUTPUT,
        ]
        assert result.entries[0].id < result.entries[1].id
        assert result.entries[0].origin.roast_event_id == result.roast.id

    async def test_output_merges_into_existing_roasted_item(self, scenario, memory_repos):
        green_id, _ = await scenario.purchase(100, 200_000)
        use_case = RecordRoastUseCase(memory_repos)

        first = await use_case.execute(_roast([(green_id, 50)], 40))
        second = await use_case.execute(_roast([(green_id, 50)], 42))

        assert second.output_stock_item.id == first.output_stock_item.id
        assert second.output_stock_item.quantity_kg == 82

    async def test_mixed_varieties_roast_to_blend(self, scenario, memory_repos):
        arabica_id, _ = await scenario.purchase(30, 200_000)
        robusta_id, _ = await scenario.purchase(20, 90_000, variety=BeanVariety.ROBUSTA)

        result = await RecordRoastUseCase(memory_repos).execute(
            _roast([(arabica_id, 30), (robusta_id, 20)], 42)
        )

        assert result.output_stock_item.variety == BeanVariety.BLEND

    async def test_roasted_cost(self, scenario, memory_repos):
        green_id, _ = await scenario.purchase(100, 200_000)
        result = await RecordRoastUseCase(memory_repos).execute(
            _roast([(green_id, 100)], 85, operational_cost_per_kg=15_000)
        )

        basis = await get_lineage_resolver(memory_repos).resolve(result.output_stock_item.id)
        assert basis.cost_per_kg == pytest.approx(252_941.18, abs=0.01)

    async def test_output_heavier_than_input_rejected(self, scenario, memory_repos):
        green_id, _ = await scenario.purchase(100, 200_000)

        with pytest.raises(ValidationError) as exc_info:
            await RecordRoastUseCase(memory_repos).execute(_roast([(green_id, 50)], 51))

        assert exc_info.value.details["field"] == "output_weight_kg"
        assert await memory_repos.roasts.list() == []

    async def test_roasted_input_rejected(self, scenario, memory_repos):
        roasted_id = await scenario.stock_item(StockKind.ROASTED_BEAN)
        await scenario.ledger.adjust(roasted_id, 10, reason="count", unit_cost=250_000)

        with pytest.raises(ValidationError) as exc_info:
            await RecordRoastUseCase(memory_repos).execute(_roast([(roasted_id, 5)], 4))
        assert exc_info.value.details["field"] == "inputs"

    async def test_insufficient_green_rolls_back_everything(self, scenario, memory_repos):
        green_id, _ = await scenario.purchase(20, 200_000)

        with pytest.raises(InsufficientStockError):
            await RecordRoastUseCase(memory_repos).execute(_roast([(green_id, 25)], 20))

        assert await memory_repos.roasts.list() == []
        assert await memory_repos.stock.list({"kind": StockKind.ROASTED_BEAN}) == []
        assert (await memory_repos.stock.get(green_id)).quantity_kg == 20

    async def test_unknown_input(self, memory_repos):
        with pytest.raises(NotFoundError):
            await RecordRoastUseCase(memory_repos).execute(_roast([("ST-missing", 5)], 4))

    def test_duplicate_inputs_rejected_by_request(self):
        with pytest.raises(PydanticValidationError):
            _roast([("ST1", 5), ("ST1", 5)], 8)


class TestRecordBlend:
    async def _roasted_pair(self, scenario) -> tuple[str, str]:
        first = await scenario.stock_item(StockKind.ROASTED_BEAN)
        second = await scenario.stock_item(StockKind.ROASTED_BEAN, BeanVariety.ROBUSTA)
        await scenario.ledger.adjust(first, 20, reason="Opening stock", unit_cost=250_000)
        await scenario.ledger.adjust(second, 20, reason="Opening stock", unit_cost=300_000)
        return first, second

    async def test_blend_quoted_and_consumed(self, scenario, memory_repos):
        first, second = await self._roasted_pair(scenario)

        result = await RecordBlendUseCase(memory_repos).execute(
            _blend([(first, 70), (second, 30)], 10)
        )

        assert result.blend.quoted_cost_per_kg == pytest.approx(265_000)
        assert (await memory_repos.stock.get(first)).quantity_kg == pytest.approx(13)
        assert (await memory_repos.stock.get(second)).quantity_kg == pytest.approx(17)
        assert result.output_stock_item.variety == BeanVariety.BLEND
        assert result.output_stock_item.quantity_kg == 10
        assert [e.origin_type for e in result.entries] == [
            OriginType.BLEND_CONSUMPTION,
            OriginType.BLEND_CONSUMPTION,
            OriginType.BLEND_OUTPUT,
        ]

    async def test_each_blend_gets_new_stock_item(self, scenario, memory_repos):
        first, second = await self._roasted_pair(scenario)
        use_case = RecordBlendUseCase(memory_repos)

        a = await use_case.execute(_blend([(first, 50), (second, 50)], 4))
        b = await use_case.execute(_blend([(first, 50), (second, 50)], 4))

        assert a.output_stock_item.id != b.output_stock_item.id

    async def test_blend_cost_matches_quote(self, scenario, memory_repos):
        first, second = await self._roasted_pair(scenario)
        result = await RecordBlendUseCase(memory_repos).execute(
            _blend([(first, 50), (second, 50)], 10)
        )

        basis = await get_lineage_resolver(memory_repos).resolve(result.output_stock_item.id)
        assert basis.cost_per_kg == pytest.approx(275_000)

    async def test_percentages_must_sum_to_100(self, scenario, memory_repos):
        first, second = await self._roasted_pair(scenario)

        with pytest.raises(ValidationError) as exc_info:
            await RecordBlendUseCase(memory_repos).execute(
                _blend([(first, 50), (second, 40)], 10)
            )

        assert exc_info.value.details["field"] == "components"
        assert await memory_repos.blends.list() == []

    async def test_duplicate_components_rejected(self, scenario, memory_repos):
        first, _ = await self._roasted_pair(scenario)
        with pytest.raises(ValidationError):
            await RecordBlendUseCase(memory_repos).execute(
                _blend([(first, 50), (first, 50)], 10)
            )

    async def test_green_component_rejected(self, scenario, memory_repos):
        first, _ = await self._roasted_pair(scenario)
        green_id, _ = await scenario.purchase(20, 200_000)

        with pytest.raises(ValidationError) as exc_info:
            await RecordBlendUseCase(memory_repos).execute(
                _blend([(first, 50), (green_id, 50)], 10)
            )
        assert exc_info.value.details["field"] == "components"

    async def test_unpriced_component_blocks_blend(self, scenario, memory_repos):
        first, _ = await self._roasted_pair(scenario)
        unpriced = await scenario.stock_item(StockKind.ROASTED_BEAN, BeanVariety.LIBERICA)
        await scenario.ledger.adjust(unpriced, 10, reason="Found in storage")

        with pytest.raises(BrokenLineageError):
            await RecordBlendUseCase(memory_repos).execute(
                _blend([(first, 50), (unpriced, 50)], 10)
            )
        assert await memory_repos.blends.list() == []

    async def test_insufficient_component(self, scenario, memory_repos):
        first, second = await self._roasted_pair(scenario)

        with pytest.raises(InsufficientStockError):
            await RecordBlendUseCase(memory_repos).execute(
                _blend([(first, 50), (second, 50)], 50)
            )

        assert (await memory_repos.stock.get(first)).quantity_kg == 20
        assert len(await memory_repos.stock.list({"variety": BeanVariety.BLEND})) == 0
