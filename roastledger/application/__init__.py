"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API commands.
"""

from roastledger.application.services import (
    get_lineage_resolver,
    get_valuation_engine,
    get_warehouse_ledger,
    reset_services,
)

__all__ = [
    "get_warehouse_ledger",
    "get_lineage_resolver",
    "get_valuation_engine",
    "reset_services",
]
