"""
Domain exceptions for the Roast Ledger application.

Every failure of a command or query is one of these types. Nothing in the
cost path converts a failure into a zero or default value.
"""

from typing import Any


class RoastLedgerError(Exception):
    """Base exception for all Roast Ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(RoastLedgerError):
    """Base exception for storage operations."""

    pass


class NotFoundError(StorageError):
    """Entity not found in the record store."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Validation Exceptions
class ValidationError(RoastLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidStatusTransitionError(ValidationError):
    """Purchase order status change that is not allowed."""

    def __init__(self, purchase_order_id: str, current: str, requested: str):
        super().__init__(
            field="status",
            message=f"cannot move purchase order {purchase_order_id} from {current} to {requested}",
            value=requested,
        )
        self.code = "INVALID_STATUS_TRANSITION"
        self.details.update(
            {
                "purchase_order_id": purchase_order_id,
                "current": current,
                "requested": requested,
            }
        )


# Ledger Exceptions
class InsufficientStockError(RoastLedgerError):
    """Outbound ledger entry would drive the balance negative."""

    def __init__(self, stock_item_id: str, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for {stock_item_id}: "
            f"requested {requested:g} kg, available {available:g} kg",
            code="INSUFFICIENT_STOCK",
            details={
                "stock_item_id": stock_item_id,
                "requested": requested,
                "available": available,
            },
        )


# Lineage Exceptions
class LineageError(RoastLedgerError):
    """Base exception for cost lineage resolution."""

    pass


class BrokenLineageError(LineageError):
    """An origin reference cannot be resolved to a priced source."""

    def __init__(
        self,
        stock_item_id: str,
        reason: str,
        ledger_entry_id: int | None = None,
    ):
        super().__init__(
            f"Broken lineage for {stock_item_id}: {reason}",
            code="BROKEN_LINEAGE",
            details={
                "stock_item_id": stock_item_id,
                "reason": reason,
                "ledger_entry_id": ledger_entry_id,
            },
        )


class CyclicLineageError(LineageError):
    """A stock item appears in its own ancestry."""

    def __init__(self, stock_item_id: str, path: list[str]):
        super().__init__(
            f"Cyclic lineage at {stock_item_id}: {' -> '.join(path + [stock_item_id])}",
            code="CYCLIC_LINEAGE",
            details={"stock_item_id": stock_item_id, "path": path},
        )


class ConfigurationError(RoastLedgerError):
    """Configuration error."""

    pass
