"""Derived valuation results. Computed from the ledger, never persisted."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from roastledger.core.entities.ledger import OriginType


class LineageNode(BaseModel):
    """One priced inbound ledger entry and the sources behind it."""

    stock_item_id: str
    ledger_entry_id: int
    origin_type: OriginType
    origin_id: str | None = None
    quantity_kg: float
    cost_per_kg: float
    sources: list[LineageNode] = Field(default_factory=list)


class CostBasis(BaseModel):
    """Weighted acquisition + processing cost of a stock item."""

    stock_item_id: str
    cost_per_kg: float
    priced_quantity_kg: float  # kilograms on hand at cost_per_kg
    as_of_entry_id: int | None = None  # None = whole ledger
    lineage: list[LineageNode] = Field(default_factory=list)


class UnitEconomics(BaseModel):
    """HPP for one retail package of a roasted stock item."""

    stock_item_id: str
    packaging_size_kg: float
    bean_cost_per_kg: float
    packaging_cost: float
    other_cost_per_kg: float
    cost_per_package: float
    cost_per_kg: float


class SaleMargin(BaseModel):
    """Revenue, cost and margin of one sale."""

    sale_id: str
    revenue: float
    cogs: float
    gross_margin: float


class BlendAudit(BaseModel):
    """Quoted blend cost against the cost recomputed from the ledger."""

    blend_event_id: str
    quoted_cost_per_kg: float | None
    recomputed_cost_per_kg: float
    matches: bool


class PeriodFigures(BaseModel):
    """Profit and loss figures for a date range."""

    start_date: date
    end_date: date
    revenue: float
    cogs: float
    gross_profit: float
    expenses: float
    net_profit: float
    sales_count: int


class FinancialSummary(PeriodFigures):
    """Period figures plus open balances, with the preceding period for comparison."""

    currency: str
    accounts_receivable: float
    accounts_payable: float
    previous_period: PeriodFigures | None = None  # same length, ending the day before
