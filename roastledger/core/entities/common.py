"""Shared helpers for domain entities."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Naive UTC timestamp, the form persisted by the stores."""
    return datetime.now(UTC).replace(tzinfo=None)
