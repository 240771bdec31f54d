"""Tests for the valuation query use cases."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from roastledger.application.dto.requests import (
    BlendComponentRequest,
    QuoteBlendRequest,
    UnitEconomicsRequest,
)
from roastledger.application.use_cases.blend_pricing import AuditBlendUseCase, QuoteBlendUseCase
from roastledger.application.use_cases.get_cost_basis import GetCostBasisUseCase
from roastledger.application.use_cases.get_financials import (
    GetCogsUseCase,
    GetFinancialSummaryUseCase,
    GetSaleMarginUseCase,
)
from roastledger.application.use_cases.get_unit_economics import GetUnitEconomicsUseCase
from roastledger.core.entities import BeanVariety, Packaging, StockKind
from roastledger.core.exceptions import BrokenLineageError, NotFoundError, ValidationError

ROASTED_COST = 21_500_000 / 85


@pytest.fixture
async def roasted(scenario) -> str:
    green_id, _ = await scenario.purchase(100, 200_000)
    roasted_id, _ = await scenario.roast([(green_id, 100)], 85, operational_cost_per_kg=15_000)
    return roasted_id


class TestGetCostBasis:
    async def test_cost_basis_with_lineage(self, memory_repos, roasted):
        use_case = GetCostBasisUseCase(memory_repos)

        basis = await use_case.execute(roasted)
        response = use_case.to_response(basis)

        assert response.cost_per_kg == pytest.approx(ROASTED_COST)
        assert response.currency == "IDR"
        assert response.lineage[0].origin_type == "roast_output"
        assert response.lineage[0].sources[0].origin_type == "purchase_receipt"

    async def test_without_lineage(self, memory_repos, roasted):
        use_case = GetCostBasisUseCase(memory_repos)
        response = use_case.to_response(await use_case.execute(roasted), include_lineage=False)
        assert response.lineage == []

    async def test_unknown_item_is_not_found(self, memory_repos):
        with pytest.raises(NotFoundError):
            await GetCostBasisUseCase(memory_repos).execute("ST-missing")

    async def test_empty_item_is_broken(self, scenario, memory_repos):
        stock_id = await scenario.stock_item()
        with pytest.raises(BrokenLineageError):
            await GetCostBasisUseCase(memory_repos).execute(stock_id)


class TestFinancialQueries:
    async def test_cogs(self, scenario, memory_repos, roasted):
        await scenario.sell(roasted, 10, 450_000, sale_date=date(2026, 3, 2))
        await scenario.sell(roasted, 10, 450_000, sale_date=date(2026, 4, 2))

        response = await GetCogsUseCase(memory_repos).execute(date(2026, 3, 1), date(2026, 3, 31))

        assert response.sales_count == 1
        assert response.cogs == pytest.approx(10 * ROASTED_COST)

    async def test_sale_margin(self, scenario, memory_repos, roasted):
        sale_id = await scenario.sell(roasted, 10, 450_000)
        use_case = GetSaleMarginUseCase(memory_repos)

        response = use_case.to_response(await use_case.execute(sale_id))

        assert response.sale_id == sale_id
        assert response.gross_margin == pytest.approx(1_970_588.24, abs=0.01)

    async def test_sale_margin_unknown_sale(self, memory_repos):
        with pytest.raises(NotFoundError):
            await GetSaleMarginUseCase(memory_repos).execute("SL-missing")

    async def test_summary_response(self, scenario, memory_repos, roasted):
        await scenario.sell(roasted, 10, 450_000, sale_date=date(2026, 3, 2))
        use_case = GetFinancialSummaryUseCase(memory_repos)

        response = use_case.to_response(
            await use_case.execute(date(2026, 3, 1), date(2026, 3, 31))
        )

        assert response.revenue == pytest.approx(4_500_000)
        assert response.accounts_receivable == pytest.approx(4_500_000)


class TestBlendPricing:
    async def _components(self, scenario) -> tuple[str, str]:
        first = await scenario.stock_item(StockKind.ROASTED_BEAN)
        second = await scenario.stock_item(StockKind.ROASTED_BEAN, BeanVariety.ROBUSTA)
        await scenario.ledger.adjust(first, 20, reason="Opening stock", unit_cost=250_000)
        await scenario.ledger.adjust(second, 20, reason="Opening stock", unit_cost=300_000)
        return first, second

    async def test_quote(self, scenario, memory_repos):
        first, second = await self._components(scenario)

        quote = await QuoteBlendUseCase(memory_repos).execute(
            QuoteBlendRequest(
                components=[
                    BlendComponentRequest(stock_item_id=first, percentage=50),
                    BlendComponentRequest(stock_item_id=second, percentage=50),
                ]
            )
        )

        assert quote.cost_per_kg == pytest.approx(275_000)
        assert [c.cost_per_kg for c in quote.components] == [250_000, 300_000]

    async def test_quote_needs_100_percent(self, scenario, memory_repos):
        first, second = await self._components(scenario)

        with pytest.raises(ValidationError, match="not 100"):
            await QuoteBlendUseCase(memory_repos).execute(
                QuoteBlendRequest(
                    components=[
                        BlendComponentRequest(stock_item_id=first, percentage=60),
                        BlendComponentRequest(stock_item_id=second, percentage=60),
                    ]
                )
            )

    async def test_audit(self, scenario, memory_repos):
        first, second = await self._components(scenario)
        _, blend_id = await scenario.blend([(first, 50), (second, 50)], 10, 275_000)
        use_case = AuditBlendUseCase(memory_repos)

        response = use_case.to_response(await use_case.execute(blend_id))

        assert response.blend_event_id == blend_id
        assert response.matches is True


class TestGetUnitEconomics:
    async def test_explicit_packaging(self, memory_repos, roasted):
        use_case = GetUnitEconomicsUseCase(memory_repos)

        result = await use_case.execute(
            UnitEconomicsRequest(stock_item_id=roasted, packaging_size_kg=0.25, packaging_cost=5_000)
        )

        assert result.cost_per_package == pytest.approx(ROASTED_COST * 0.25 + 5_000)

    async def test_stored_packaging(self, memory_repos, roasted):
        packaging_id = await memory_repos.packaging.create(
            Packaging(name="1kg foil bag", size_kg=1, cost=12_000)
        )
        use_case = GetUnitEconomicsUseCase(memory_repos)

        result = await use_case.execute(
            UnitEconomicsRequest(stock_item_id=roasted, packaging_id=packaging_id)
        )
        response = use_case.to_response(result, packaging_id=packaging_id)

        assert result.packaging_size_kg == 1
        assert result.cost_per_package == pytest.approx(ROASTED_COST + 12_000)
        assert response.packaging_id == packaging_id
        assert response.currency == "IDR"

    async def test_unknown_packaging(self, memory_repos, roasted):
        with pytest.raises(NotFoundError):
            await GetUnitEconomicsUseCase(memory_repos).execute(
                UnitEconomicsRequest(stock_item_id=roasted, packaging_id="PK-missing")
            )

    def test_packaging_required(self):
        with pytest.raises(PydanticValidationError):
            UnitEconomicsRequest(stock_item_id="ST1", packaging_size_kg=0.25)
