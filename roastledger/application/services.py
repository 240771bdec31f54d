"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from roastledger.config import get_settings
from roastledger.core.services import LineageResolver, ValuationEngine, WarehouseLedger

if TYPE_CHECKING:
    from roastledger.core.interfaces import Repositories


# Singleton service instances
_warehouse_ledger: WarehouseLedger | None = None
_lineage_resolver: LineageResolver | None = None
_valuation_engine: ValuationEngine | None = None


def _default_repositories() -> "Repositories":
    # Lazy import infrastructure to avoid circular imports
    from roastledger.infrastructure.storage import get_repositories

    return get_repositories()


def get_warehouse_ledger(repositories: "Repositories | None" = None) -> WarehouseLedger:
    """
    Get or create WarehouseLedger instance.

    Passing repositories builds a fresh, uncached instance over them.
    """
    global _warehouse_ledger

    if repositories is None and _warehouse_ledger is not None:
        return _warehouse_ledger

    repos = repositories or _default_repositories()
    service = WarehouseLedger(
        ledger_store=repos.ledger,
        stock_store=repos.stock,
        quantity_tolerance=get_settings().valuation.quantity_tolerance,
    )

    if repositories is None:
        _warehouse_ledger = service
    return service


def get_lineage_resolver(repositories: "Repositories | None" = None) -> LineageResolver:
    """Get or create LineageResolver instance."""
    global _lineage_resolver

    if repositories is None and _lineage_resolver is not None:
        return _lineage_resolver

    repos = repositories or _default_repositories()
    service = LineageResolver(
        ledger_store=repos.ledger,
        purchase_order_store=repos.purchase_orders,
        roast_store=repos.roasts,
        blend_store=repos.blends,
        quantity_tolerance=get_settings().valuation.quantity_tolerance,
    )

    if repositories is None:
        _lineage_resolver = service
    return service


def get_valuation_engine(repositories: "Repositories | None" = None) -> ValuationEngine:
    """
    Get or create ValuationEngine instance.

    The engine shares the lineage resolver of the same repositories, so blend
    quotes, HPP and COGS are all priced by one resolver.
    """
    global _valuation_engine

    if repositories is None and _valuation_engine is not None:
        return _valuation_engine

    repos = repositories or _default_repositories()
    valuation = get_settings().valuation
    service = ValuationEngine(
        resolver=get_lineage_resolver(repositories),
        ledger_store=repos.ledger,
        sale_store=repos.sales,
        blend_store=repos.blends,
        expense_store=repos.expenses,
        purchase_order_store=repos.purchase_orders,
        percentage_tolerance=valuation.percentage_tolerance,
        cost_tolerance=valuation.cost_tolerance,
        currency=valuation.currency,
    )

    if repositories is None:
        _valuation_engine = service
    return service


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _warehouse_ledger, _lineage_resolver, _valuation_engine
    _warehouse_ledger = None
    _lineage_resolver = None
    _valuation_engine = None
