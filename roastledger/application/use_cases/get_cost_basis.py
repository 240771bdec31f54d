"""Get Cost Basis Use Case: cost per kg and lineage tree of a stock item."""

from roastledger.application.dto.converters import lineage_node_response
from roastledger.application.dto.responses import CostBasisResponse
from roastledger.application.services import get_lineage_resolver
from roastledger.config import get_logger, get_settings
from roastledger.core.entities import CostBasis
from roastledger.core.interfaces import Repositories
from roastledger.core.services import LineageResolver

logger = get_logger(__name__)


class GetCostBasisUseCase:
    """Resolve a stock item's cost basis. Lineage failures propagate as errors."""

    def __init__(
        self,
        repositories: Repositories | None = None,
        resolver: LineageResolver | None = None,
    ):
        self._repositories = repositories
        self._resolver = resolver

    def _get_repositories(self) -> Repositories:
        if self._repositories is None:
            from roastledger.infrastructure.storage import get_repositories

            self._repositories = get_repositories()
        return self._repositories

    def _get_resolver(self) -> LineageResolver:
        if self._resolver is None:
            self._resolver = get_lineage_resolver(self._repositories)
        return self._resolver

    async def execute(
        self, stock_item_id: str, as_of_entry_id: int | None = None
    ) -> CostBasis:
        """Execute get cost basis use case."""
        # Unknown ids are NotFoundError, not a broken lineage
        await self._get_repositories().stock.get(stock_item_id)

        basis = await self._get_resolver().resolve(stock_item_id, as_of_entry_id)
        logger.info(
            "cost_basis_queried",
            stock_item_id=stock_item_id,
            cost_per_kg=round(basis.cost_per_kg, 2),
        )
        return basis

    def to_response(self, basis: CostBasis, include_lineage: bool = True) -> CostBasisResponse:
        """Convert result to API response."""
        return CostBasisResponse(
            stock_item_id=basis.stock_item_id,
            cost_per_kg=basis.cost_per_kg,
            priced_quantity_kg=basis.priced_quantity_kg,
            currency=get_settings().valuation.currency,
            as_of_entry_id=basis.as_of_entry_id,
            lineage=[lineage_node_response(n) for n in basis.lineage] if include_lineage else [],
        )
