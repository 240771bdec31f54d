"""Validation and filtering helpers shared by the storage backends."""

from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from roastledger.core.exceptions import ValidationError

T = TypeVar("T", bound=BaseModel)


def to_validation_error(exc: PydanticValidationError) -> ValidationError:
    """Convert the first pydantic error into a domain ValidationError."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "record"
    return ValidationError(field, first.get("msg", str(exc)), first.get("input"))


def validate_record(model: type[T], data: dict[str, Any]) -> T:
    """Build a model from a dict, raising the domain ValidationError on failure."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise to_validation_error(e) from e


def check_update_fields(
    model: type[BaseModel],
    fields: dict[str, Any],
    protected: frozenset[str] = frozenset({"id"}),
) -> None:
    """Reject partial updates that touch protected or unknown fields."""
    for name in fields:
        if name in protected:
            raise ValidationError(name, "field cannot be changed by update", fields[name])
        if name not in model.model_fields:
            raise ValidationError(name, "unknown field", fields[name])


def normalize(value: Any) -> Any:
    """Bring a filter value into the form produced by model_dump(mode='json')."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def matches(data: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    """Field equality match of a JSON-dumped record against filters."""
    if not filters:
        return True
    return all(data.get(key) == normalize(value) for key, value in filters.items())
