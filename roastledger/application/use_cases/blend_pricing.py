"""Blend pricing use cases: quote a recipe, audit a produced blend."""

from roastledger.application.dto.requests import QuoteBlendRequest
from roastledger.application.dto.responses import (
    BlendAuditResponse,
    BlendComponentResponse,
    BlendQuoteResponse,
)
from roastledger.application.services import get_valuation_engine
from roastledger.config import get_logger, get_settings
from roastledger.core.entities import BlendAudit
from roastledger.core.interfaces import Repositories
from roastledger.core.services import ValuationEngine

logger = get_logger(__name__)


class _BlendPricing:
    def __init__(
        self,
        repositories: Repositories | None = None,
        valuation_engine: ValuationEngine | None = None,
    ):
        self._repositories = repositories
        self._valuation = valuation_engine

    def _get_valuation(self) -> ValuationEngine:
        if self._valuation is None:
            self._valuation = get_valuation_engine(self._repositories)
        return self._valuation


class QuoteBlendUseCase(_BlendPricing):
    """Current cost per kg of a blend recipe, priced from each component's lineage."""

    async def execute(self, request: QuoteBlendRequest) -> BlendQuoteResponse:
        valuation = self._get_valuation()

        components = []
        priced = []
        for component in request.components:
            basis = await valuation.cost_basis(component.stock_item_id)
            priced.append((basis.cost_per_kg, component.percentage))
            components.append(
                BlendComponentResponse(
                    stock_item_id=component.stock_item_id,
                    percentage=component.percentage,
                    cost_per_kg=basis.cost_per_kg,
                )
            )

        cost_per_kg = valuation.blend_cost(priced)
        logger.info("blend_quoted", components=len(components), cost_per_kg=round(cost_per_kg, 2))
        return BlendQuoteResponse(
            cost_per_kg=cost_per_kg,
            currency=get_settings().valuation.currency,
            components=components,
        )


class AuditBlendUseCase(_BlendPricing):
    """Recompute a blend's cost from the ledger and compare it with the quote."""

    async def execute(self, blend_event_id: str) -> BlendAudit:
        return await self._get_valuation().audit_blend(blend_event_id)

    def to_response(self, audit: BlendAudit) -> BlendAuditResponse:
        return BlendAuditResponse.model_validate(audit.model_dump())
