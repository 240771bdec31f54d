"""Get Unit Economics Use Case: HPP per retail package."""

from roastledger.application.dto.requests import UnitEconomicsRequest
from roastledger.application.dto.responses import UnitEconomicsResponse
from roastledger.application.services import get_valuation_engine
from roastledger.config import get_logger, get_settings
from roastledger.core.entities import UnitEconomics
from roastledger.core.interfaces import Repositories
from roastledger.core.services import ValuationEngine

logger = get_logger(__name__)


class GetUnitEconomicsUseCase:
    """Price one package of a roasted stock item, from a stored packaging option or explicit values."""

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

    async def execute(self, request: UnitEconomicsRequest) -> UnitEconomics:
        """Execute get unit economics use case."""
        repos = self._get_repositories()
        await repos.stock.get(request.stock_item_id)

        size_kg = request.packaging_size_kg
        packaging_cost = request.packaging_cost
        if request.packaging_id is not None:
            packaging = await repos.packaging.get(request.packaging_id)
            size_kg = packaging.size_kg
            packaging_cost = packaging.cost

        result = await self._get_valuation().unit_economics(
            request.stock_item_id,
            packaging_size_kg=size_kg,
            packaging_cost=packaging_cost,
            other_cost_per_kg=request.other_cost_per_kg,
        )
        logger.info(
            "unit_economics_computed",
            stock_item_id=request.stock_item_id,
            packaging_size_kg=size_kg,
            cost_per_package=round(result.cost_per_package, 2),
        )
        return result

    def to_response(
        self, result: UnitEconomics, packaging_id: str | None = None
    ) -> UnitEconomicsResponse:
        """Convert result to API response."""
        return UnitEconomicsResponse(
            **result.model_dump(),
            currency=get_settings().valuation.currency,
            packaging_id=packaging_id,
        )
