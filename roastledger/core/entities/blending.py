"""Blending domain entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field, FiniteFloat, model_validator

from roastledger.core.entities.common import utc_now

PERCENTAGE_TOLERANCE = 0.01


class BlendComponent(BaseModel):
    """Share of one roasted stock item in a blend."""

    stock_item_id: str
    percentage: float = Field(..., gt=0, le=100, allow_inf_nan=False)


class BlendEvent(BaseModel):
    """A blend batch produced from roasted components."""

    id: str | None = None
    name: str = Field(..., min_length=1)
    blend_date: date = Field(default_factory=date.today)
    components: list[BlendComponent] = Field(..., min_length=1)
    output_stock_item_id: str
    output_weight_kg: float = Field(..., gt=0, allow_inf_nan=False)
    # Cost per kg quoted when the blend was made; kept for audit only
    quoted_cost_per_kg: FiniteFloat | None = Field(default=None, ge=0)
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    def component_weight(self, component: BlendComponent) -> float:
        """Kilograms of a component consumed by this batch."""
        return self.output_weight_kg * component.percentage / 100

    @model_validator(mode="after")
    def percentages_sum_to_100(self) -> "BlendEvent":
        total = sum(c.percentage for c in self.components)
        if abs(total - 100) > PERCENTAGE_TOLERANCE:
            raise ValueError(f"component percentages sum to {total}, not 100")
        return self
