"""API route modules."""

from roastledger.api.routes.health import router as health_router
from roastledger.api.routes.production import router as production_router
from roastledger.api.routes.purchasing import router as purchasing_router
from roastledger.api.routes.sales import router as sales_router
from roastledger.api.routes.stock import router as stock_router
from roastledger.api.routes.valuation import router as valuation_router

__all__ = [
    "health_router",
    "stock_router",
    "purchasing_router",
    "production_router",
    "sales_router",
    "valuation_router",
]
