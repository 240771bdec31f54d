"""
Valuation engine.

COGS, blend pricing, unit economics (HPP) and period summaries, all priced
through the lineage resolver. No side effects.
"""

from collections import defaultdict
from datetime import date, timedelta

from roastledger.config import get_logger
from roastledger.core.entities import (
    BlendAudit,
    BlendComponent,
    BlendEvent,
    CostBasis,
    Expense,
    FinancialSummary,
    LedgerEntry,
    OriginType,
    PaymentStatus,
    PeriodFigures,
    POStatus,
    PurchaseOrder,
    Sale,
    SaleMargin,
    UnitEconomics,
)
from roastledger.core.exceptions import BrokenLineageError, ValidationError
from roastledger.core.interfaces import ILedgerStore, IRecordStore
from roastledger.core.services.lineage_resolver import LineageResolver

logger = get_logger(__name__)

RECEIVABLE_STATUSES = (PaymentStatus.UNPAID, PaymentStatus.PARTIALLY_PAID)
PAYABLE_STATUSES = (POStatus.PENDING, POStatus.APPROVED)


class ValuationEngine:
    """
    Cost and profit calculations over the ledger.

    Required interfaces for DI:
    - LineageResolver: cost basis of any stock item
    - ILedgerStore: sale consumption and blend output entries
    - IRecordStore[Sale], IRecordStore[BlendEvent]: period and audit queries
    - IRecordStore[Expense], IRecordStore[PurchaseOrder]: optional, summary only
    """

    DEFAULT_PERCENTAGE_TOLERANCE = 0.01
    DEFAULT_COST_TOLERANCE = 0.01

    def __init__(
        self,
        resolver: LineageResolver,
        ledger_store: ILedgerStore,
        sale_store: IRecordStore[Sale],
        blend_store: IRecordStore[BlendEvent],
        expense_store: IRecordStore[Expense] | None = None,
        purchase_order_store: IRecordStore[PurchaseOrder] | None = None,
        percentage_tolerance: float | None = None,
        cost_tolerance: float | None = None,
        currency: str = "IDR",
    ):
        self._resolver = resolver
        self._ledger = ledger_store
        self._sales = sale_store
        self._blends = blend_store
        self._expenses = expense_store
        self._purchase_orders = purchase_order_store
        self._percentage_tolerance = (
            percentage_tolerance
            if percentage_tolerance is not None
            else self.DEFAULT_PERCENTAGE_TOLERANCE
        )
        self._cost_tolerance = (
            cost_tolerance if cost_tolerance is not None else self.DEFAULT_COST_TOLERANCE
        )
        self._currency = currency

    async def cost_basis(
        self, stock_item_id: str, as_of_entry_id: int | None = None
    ) -> CostBasis:
        return await self._resolver.resolve(stock_item_id, as_of_entry_id)

    # ------------------------------------------------------------------
    # COGS
    # ------------------------------------------------------------------

    async def cost_of_goods_sold(self, sales: list[Sale]) -> float:
        """Sum of each sale line priced at the ledger position it shipped from."""
        total = 0.0
        for sale in sales:
            total += await self._sale_cogs(sale)
        return total

    async def cogs_for_period(self, start_date: date, end_date: date) -> float:
        """COGS of every sale dated within the range (inclusive)."""
        return await self.cost_of_goods_sold(await self._sales_in_period(start_date, end_date))

    async def sale_margin(self, sale: Sale) -> SaleMargin:
        """Revenue, COGS and gross margin of one sale."""
        cogs = await self._sale_cogs(sale)
        return SaleMargin(
            sale_id=sale.id,
            revenue=sale.total_amount,
            cogs=cogs,
            gross_margin=sale.total_amount - cogs,
        )

    async def _sale_cogs(self, sale: Sale) -> float:
        entries = await self._ledger.list_by_origin(OriginType.SALE_CONSUMPTION, sale.id)
        by_stock_item: dict[str, list[LedgerEntry]] = defaultdict(list)
        for entry in entries:
            if not entry.is_inbound:
                by_stock_item[entry.stock_item_id].append(entry)

        cogs = 0.0
        for line in sale.lines:
            shipped = by_stock_item.get(line.stock_item_id)
            if not shipped:
                raise BrokenLineageError(
                    line.stock_item_id,
                    f"sale {sale.id} has no consumption entry for this stock item",
                )
            entry = shipped.pop(0)
            basis = await self._resolver.resolve(line.stock_item_id, entry.id)
            cogs += basis.cost_per_kg * line.quantity_kg
        return cogs

    async def _sales_in_period(self, start_date: date, end_date: date) -> list[Sale]:
        if start_date > end_date:
            raise ValidationError("end_date", "end date is before start date", end_date)
        return [
            s for s in await self._sales.list() if start_date <= s.sale_date <= end_date
        ]

    # ------------------------------------------------------------------
    # Blends
    # ------------------------------------------------------------------

    def blend_cost(self, components: list[tuple[float, float]]) -> float:
        """
        Weighted cost per kg of a blend.

        Args:
            components: (cost_per_kg, percentage) pairs

        Raises:
            ValidationError: percentages do not sum to 100
        """
        if not components:
            raise ValidationError("components", "a blend needs at least one component")
        total_pct = sum(pct for _, pct in components)
        if abs(total_pct - 100) > self._percentage_tolerance:
            raise ValidationError(
                "components",
                f"percentages sum to {total_pct:g}, not 100",
                total_pct,
            )
        return sum(cost * pct / 100 for cost, pct in components)

    async def price_blend(
        self,
        components: list[BlendComponent],
        as_of_entry_id: int | None = None,
    ) -> float:
        """Blend cost per kg with each component priced from its lineage."""
        priced = []
        for component in components:
            basis = await self._resolver.resolve(component.stock_item_id, as_of_entry_id)
            priced.append((basis.cost_per_kg, component.percentage))
        return self.blend_cost(priced)

    async def audit_blend(self, blend_event_id: str) -> BlendAudit:
        """Compare the quoted blend cost with the cost recomputed from the ledger."""
        blend = await self._blends.get(blend_event_id)
        outputs = await self._ledger.list_by_origin(OriginType.BLEND_OUTPUT, blend_event_id)
        as_of = outputs[0].id if outputs else None

        recomputed = await self.price_blend(blend.components, as_of)
        matches = (
            blend.quoted_cost_per_kg is not None
            and abs(blend.quoted_cost_per_kg - recomputed) <= self._cost_tolerance
        )
        if not matches:
            logger.warning(
                "blend_cost_mismatch",
                blend_event_id=blend_event_id,
                quoted=blend.quoted_cost_per_kg,
                recomputed=recomputed,
            )
        return BlendAudit(
            blend_event_id=blend_event_id,
            quoted_cost_per_kg=blend.quoted_cost_per_kg,
            recomputed_cost_per_kg=recomputed,
            matches=matches,
        )

    # ------------------------------------------------------------------
    # Unit economics (HPP)
    # ------------------------------------------------------------------

    async def unit_economics(
        self,
        stock_item_id: str,
        packaging_size_kg: float,
        packaging_cost: float,
        other_cost_per_kg: float = 0.0,
    ) -> UnitEconomics:
        """
        Cost of one retail package.

        cost_per_package = bean_cost * size + packaging_cost + other_cost * size
        """
        if packaging_size_kg <= 0:
            raise ValidationError(
                "packaging_size_kg", "must be greater than zero", packaging_size_kg
            )
        if packaging_cost < 0:
            raise ValidationError("packaging_cost", "cannot be negative", packaging_cost)
        if other_cost_per_kg < 0:
            raise ValidationError("other_cost_per_kg", "cannot be negative", other_cost_per_kg)

        basis = await self._resolver.resolve(stock_item_id)
        cost_per_package = (
            basis.cost_per_kg * packaging_size_kg
            + packaging_cost
            + other_cost_per_kg * packaging_size_kg
        )
        return UnitEconomics(
            stock_item_id=stock_item_id,
            packaging_size_kg=packaging_size_kg,
            bean_cost_per_kg=basis.cost_per_kg,
            packaging_cost=packaging_cost,
            other_cost_per_kg=other_cost_per_kg,
            cost_per_package=cost_per_package,
            cost_per_kg=cost_per_package / packaging_size_kg,
        )

    # ------------------------------------------------------------------
    # Period summary
    # ------------------------------------------------------------------

    async def period_figures(self, start_date: date, end_date: date) -> PeriodFigures:
        """Revenue, COGS and expenses of sales and expenses dated within a range."""
        sales = await self._sales_in_period(start_date, end_date)
        revenue = sum(s.total_amount for s in sales)
        cogs = await self.cost_of_goods_sold(sales)

        expenses = 0.0
        if self._expenses is not None:
            expenses = sum(
                e.amount
                for e in await self._expenses.list()
                if start_date <= e.expense_date <= end_date
            )

        gross_profit = revenue - cogs
        return PeriodFigures(
            start_date=start_date,
            end_date=end_date,
            revenue=revenue,
            cogs=cogs,
            gross_profit=gross_profit,
            expenses=expenses,
            net_profit=gross_profit - expenses,
            sales_count=len(sales),
        )

    async def financial_summary(
        self, start_date: date, end_date: date, compare_previous: bool = True
    ) -> FinancialSummary:
        """
        Profit and loss for a date range.

        Receivables and payables are open balances as of now, not period totals.
        With compare_previous the window of the same length ending the day
        before start_date is reported alongside.
        """
        current = await self.period_figures(start_date, end_date)

        previous = None
        if compare_previous:
            previous_end = start_date - timedelta(days=1)
            previous = await self.period_figures(
                previous_end - (end_date - start_date), previous_end
            )

        receivable = sum(
            s.total_amount
            for s in await self._sales.list()
            if s.payment_status in RECEIVABLE_STATUSES
        )

        payable = 0.0
        if self._purchase_orders is not None:
            payable = sum(
                po.total_amount
                for po in await self._purchase_orders.list()
                if po.status in PAYABLE_STATUSES
            )

        summary = FinancialSummary(
            **current.model_dump(),
            currency=self._currency,
            accounts_receivable=receivable,
            accounts_payable=payable,
            previous_period=previous,
        )
        logger.info(
            "financial_summary_computed",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            revenue=summary.revenue,
            cogs=summary.cogs,
            net_profit=summary.net_profit,
            previous_net_profit=previous.net_profit if previous else None,
        )
        return summary
