"""
Core business logic services.

Layer-pure services that depend only on:
- roastledger/core/entities/*
- roastledger/core/interfaces/*
- roastledger/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from roastledger.core.services.lineage_resolver import LineageResolver
from roastledger.core.services.valuation_engine import ValuationEngine
from roastledger.core.services.warehouse_ledger import WarehouseLedger

__all__ = [
    # Ledger
    "WarehouseLedger",
    # Lineage
    "LineageResolver",
    # Valuation
    "ValuationEngine",
]
