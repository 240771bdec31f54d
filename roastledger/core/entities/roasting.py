"""Roasting domain entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from roastledger.core.entities.common import utc_now


class RoastInput(BaseModel):
    """Green bean charge taken from one stock item."""

    stock_item_id: str
    weight_kg: float = Field(..., gt=0, allow_inf_nan=False)


class RoastEvent(BaseModel):
    """
    A roast batch, internal or at an external roastery.

    operational_cost_per_kg is charged per kg of green bean input.
    """

    id: str | None = None
    batch_id: str
    roast_date: date = Field(default_factory=date.today)
    inputs: list[RoastInput] = Field(..., min_length=1)
    output_stock_item_id: str
    output_weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    operational_cost_per_kg: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    roaster_name: str | None = None
    external_roastery: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def total_input_weight(self) -> float:
        return sum(i.weight_kg for i in self.inputs)

    @property
    def yield_ratio(self) -> float:
        """Roasted weight per kg of green input."""
        return self.output_weight_kg / self.total_input_weight

    @model_validator(mode="after")
    def no_mass_creation(self) -> "RoastEvent":
        """Output weight cannot exceed total input weight."""
        if self.output_weight_kg > self.total_input_weight:
            raise ValueError(
                f"output weight {self.output_weight_kg} kg exceeds "
                f"input weight {self.total_input_weight} kg"
            )
        return self
