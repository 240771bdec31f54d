"""Financial query use cases: COGS, sale margin and period summary."""

from datetime import date

from roastledger.application.dto.responses import (
    CogsResponse,
    FinancialSummaryResponse,
    SaleMarginResponse,
)
from roastledger.application.services import get_valuation_engine
from roastledger.config import get_settings
from roastledger.core.entities import FinancialSummary, SaleMargin
from roastledger.core.interfaces import Repositories
from roastledger.core.services import ValuationEngine


class _ValuationQuery:
    def __init__(
        self,
        repositories: Repositories | None = None,
        valuation_engine: ValuationEngine | None = None,
    ):
        self._repositories = repositories
        self._valuation = valuation_engine

    def _get_repositories(self) -> Repositories:
        if self._repositories is None:
            from roastledger.infrastructure.storage import get_repositories

            self._repositories = get_repositories()
        return self._repositories

    def _get_valuation(self) -> ValuationEngine:
        if self._valuation is None:
            self._valuation = get_valuation_engine(self._repositories)
        return self._valuation


class GetCogsUseCase(_ValuationQuery):
    """Cost of goods sold for sales dated within a range."""

    async def execute(self, start_date: date, end_date: date) -> CogsResponse:
        valuation = self._get_valuation()
        cogs = await valuation.cogs_for_period(start_date, end_date)
        sales = [
            s
            for s in await self._get_repositories().sales.list()
            if start_date <= s.sale_date <= end_date
        ]
        return CogsResponse(
            start_date=start_date,
            end_date=end_date,
            currency=get_settings().valuation.currency,
            cogs=cogs,
            sales_count=len(sales),
        )


class GetSaleMarginUseCase(_ValuationQuery):
    """Revenue, COGS and gross margin of one sale."""

    async def execute(self, sale_id: str) -> SaleMargin:
        sale = await self._get_repositories().sales.get(sale_id)
        return await self._get_valuation().sale_margin(sale)

    def to_response(self, margin: SaleMargin) -> SaleMarginResponse:
        return SaleMarginResponse(
            sale_id=margin.sale_id,
            currency=get_settings().valuation.currency,
            revenue=margin.revenue,
            cogs=margin.cogs,
            gross_margin=margin.gross_margin,
        )


class GetFinancialSummaryUseCase(_ValuationQuery):
    """Profit and loss for a date range."""

    async def execute(
        self, start_date: date, end_date: date, compare_previous: bool = True
    ) -> FinancialSummary:
        return await self._get_valuation().financial_summary(
            start_date, end_date, compare_previous=compare_previous
        )

    def to_response(self, summary: FinancialSummary) -> FinancialSummaryResponse:
        return FinancialSummaryResponse.model_validate(summary.model_dump())
