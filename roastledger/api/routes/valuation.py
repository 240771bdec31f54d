"""
Valuation endpoints.

Cost basis, lineage, COGS, margins and unit economics are all derived from
the ledger on request; no cost figure is stored on stock or sales.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from roastledger.api.dependencies import (
    get_audit_blend_use_case,
    get_cogs_use_case,
    get_cost_basis_use_case,
    get_financial_summary_use_case,
    get_quote_blend_use_case,
    get_sale_margin_use_case,
    get_unit_economics_use_case,
)
from roastledger.application.dto.requests import QuoteBlendRequest, UnitEconomicsRequest
from roastledger.application.dto.responses import (
    BlendAuditResponse,
    BlendQuoteResponse,
    CogsResponse,
    CostBasisResponse,
    ErrorResponse,
    FinancialSummaryResponse,
    SaleMarginResponse,
    UnitEconomicsResponse,
)
from roastledger.application.use_cases.blend_pricing import (
    AuditBlendUseCase,
    QuoteBlendUseCase,
)
from roastledger.application.use_cases.get_cost_basis import GetCostBasisUseCase
from roastledger.application.use_cases.get_financials import (
    GetCogsUseCase,
    GetFinancialSummaryUseCase,
    GetSaleMarginUseCase,
)
from roastledger.application.use_cases.get_unit_economics import GetUnitEconomicsUseCase

router = APIRouter(prefix="/api/valuation", tags=["valuation"])

LINEAGE_ERRORS = {404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}


@router.get(
    "/cost-basis/{stock_item_id}",
    response_model=CostBasisResponse,
    responses=LINEAGE_ERRORS,
)
async def get_cost_basis(
    stock_item_id: str,
    as_of_entry_id: int | None = Query(default=None, ge=1),
    use_case: GetCostBasisUseCase = Depends(get_cost_basis_use_case),
) -> CostBasisResponse:
    """Weighted cost per kg of a stock item, without the lineage tree."""
    basis = await use_case.execute(stock_item_id, as_of_entry_id)
    return use_case.to_response(basis, include_lineage=False)


@router.get(
    "/lineage/{stock_item_id}",
    response_model=CostBasisResponse,
    responses=LINEAGE_ERRORS,
)
async def get_lineage(
    stock_item_id: str,
    as_of_entry_id: int | None = Query(default=None, ge=1),
    use_case: GetCostBasisUseCase = Depends(get_cost_basis_use_case),
) -> CostBasisResponse:
    """Cost basis with the full lineage tree back to purchase receipts."""
    basis = await use_case.execute(stock_item_id, as_of_entry_id)
    return use_case.to_response(basis)


@router.get(
    "/cogs",
    response_model=CogsResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_cogs(
    start_date: date,
    end_date: date,
    use_case: GetCogsUseCase = Depends(get_cogs_use_case),
) -> CogsResponse:
    """Cost of goods sold for sales dated within the range, inclusive."""
    return await use_case.execute(start_date, end_date)


@router.get(
    "/sales/{sale_id}/margin",
    response_model=SaleMarginResponse,
    responses=LINEAGE_ERRORS,
)
async def get_sale_margin(
    sale_id: str,
    use_case: GetSaleMarginUseCase = Depends(get_sale_margin_use_case),
) -> SaleMarginResponse:
    margin = await use_case.execute(sale_id)
    return use_case.to_response(margin)


@router.get(
    "/summary",
    response_model=FinancialSummaryResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def get_financial_summary(
    start_date: date,
    end_date: date,
    compare_previous: bool = Query(default=True, description="Include the preceding period"),
    use_case: GetFinancialSummaryUseCase = Depends(get_financial_summary_use_case),
) -> FinancialSummaryResponse:
    """Revenue, COGS, expenses and open receivables/payables for a period."""
    summary = await use_case.execute(start_date, end_date, compare_previous)
    return use_case.to_response(summary)


@router.post(
    "/unit-economics",
    response_model=UnitEconomicsResponse,
    responses=LINEAGE_ERRORS,
)
async def get_unit_economics(
    request: UnitEconomicsRequest,
    use_case: GetUnitEconomicsUseCase = Depends(get_unit_economics_use_case),
) -> UnitEconomicsResponse:
    """HPP (cost of goods) of one retail package."""
    result = await use_case.execute(request)
    return use_case.to_response(result, packaging_id=request.packaging_id)


@router.post(
    "/blend-quote",
    response_model=BlendQuoteResponse,
    responses={400: {"model": ErrorResponse}, **LINEAGE_ERRORS},
)
async def quote_blend(
    request: QuoteBlendRequest,
    use_case: QuoteBlendUseCase = Depends(get_quote_blend_use_case),
) -> BlendQuoteResponse:
    """Price a blend recipe from current component costs."""
    return await use_case.execute(request)


@router.get(
    "/blends/{blend_event_id}/audit",
    response_model=BlendAuditResponse,
    responses=LINEAGE_ERRORS,
)
async def audit_blend(
    blend_event_id: str,
    use_case: AuditBlendUseCase = Depends(get_audit_blend_use_case),
) -> BlendAuditResponse:
    """Compare a blend's quoted cost with its cost recomputed from the ledger."""
    audit = await use_case.execute(blend_event_id)
    return use_case.to_response(audit)
