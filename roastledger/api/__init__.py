"""HTTP API for the roast ledger."""
