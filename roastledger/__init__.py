"""Roast Ledger: traceability and cost lineage for coffee processing."""

__version__ = "1.0.0"
