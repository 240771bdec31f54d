"""Stock domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from roastledger.core.entities.common import utc_now


class StockKind(str, Enum):
    """Processing stage of a stock item."""

    GREEN_BEAN = "green_bean"
    ROASTED_BEAN = "roasted_bean"


class BeanVariety(str, Enum):
    """Coffee bean varieties."""

    ARABICA = "arabica"
    ROBUSTA = "robusta"
    LIBERICA = "liberica"
    BLEND = "blend"


class StockItem(BaseModel):
    """
    A quantity of one bean variety at one location.

    quantity_kg is a materialized cache of the ledger sum for this item and is
    only changed by the ledger store when an entry is appended.
    """

    id: str | None = None
    kind: StockKind
    variety: BeanVariety
    quantity_kg: float = 0.0
    location: str = Field(..., min_length=1)
    version: int = 0  # bumped on every ledger append
    last_updated: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)


class AlertSetting(BaseModel):
    """Low-stock threshold for a variety and stock kind."""

    id: str | None = None
    variety: BeanVariety
    kind: StockKind
    threshold_kg: float = Field(..., ge=0, allow_inf_nan=False)
    created_at: datetime = Field(default_factory=utc_now)


class StockAlert(BaseModel):
    """An alert setting whose threshold has been reached."""

    alert_setting_id: str
    variety: BeanVariety
    kind: StockKind
    threshold_kg: float
    current_kg: float
