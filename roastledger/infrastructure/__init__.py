"""Infrastructure layer implementations."""

from roastledger.infrastructure import storage

__all__ = ["storage"]
