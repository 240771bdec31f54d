"""Sales, operating expense and packaging endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, status

from roastledger.api.dependencies import get_record_sale_use_case, get_repos
from roastledger.application.dto.converters import (
    expense_response,
    packaging_response,
    sale_response,
)
from roastledger.application.dto.requests import (
    CreateExpenseRequest,
    CreatePackagingRequest,
    RecordSaleRequest,
    UpdatePaymentStatusRequest,
)
from roastledger.application.dto.responses import (
    ErrorResponse,
    ExpenseResponse,
    PackagingResponse,
    RecordSaleResponse,
    SaleResponse,
)
from roastledger.application.use_cases.record_sale import RecordSaleUseCase
from roastledger.core.entities import Expense, Packaging, PaymentStatus
from roastledger.core.interfaces import Repositories

router = APIRouter(prefix="/api", tags=["sales"])


def _in_period(day: date, start_date: date | None, end_date: date | None) -> bool:
    if start_date is not None and day < start_date:
        return False
    if end_date is not None and day > end_date:
        return False
    return True


# =============================================================================
# Sales
# =============================================================================


@router.post(
    "/sales",
    response_model=RecordSaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def record_sale(
    request: RecordSaleRequest,
    use_case: RecordSaleUseCase = Depends(get_record_sale_use_case),
) -> RecordSaleResponse:
    """Record a sale; each line ships from its stock item."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/sales", response_model=list[SaleResponse])
async def list_sales(
    start_date: date | None = None,
    end_date: date | None = None,
    payment_status: PaymentStatus | None = None,
    repos: Repositories = Depends(get_repos),
) -> list[SaleResponse]:
    """List sales, optionally within a date range or by payment status."""
    filters = {"payment_status": payment_status} if payment_status else None
    sales = await repos.sales.list(filters)
    return [
        sale_response(s) for s in sales if _in_period(s.sale_date, start_date, end_date)
    ]


@router.get(
    "/sales/{sale_id}",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale(
    sale_id: str,
    repos: Repositories = Depends(get_repos),
) -> SaleResponse:
    return sale_response(await repos.sales.get(sale_id))


@router.patch(
    "/sales/{sale_id}/payment",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_payment_status(
    sale_id: str,
    request: UpdatePaymentStatusRequest,
    repos: Repositories = Depends(get_repos),
) -> SaleResponse:
    """Record a payment against a sale."""
    sale = await repos.sales.update(sale_id, {"payment_status": request.payment_status})
    return sale_response(sale)


# =============================================================================
# Expenses
# =============================================================================


@router.post(
    "/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_expense(
    request: CreateExpenseRequest,
    repos: Repositories = Depends(get_repos),
) -> ExpenseResponse:
    expense = Expense(
        description=request.description,
        amount=request.amount,
        category=request.category,
        expense_date=request.expense_date or date.today(),
    )
    expense_id = await repos.expenses.create(expense)
    return expense_response(await repos.expenses.get(expense_id))


@router.get("/expenses", response_model=list[ExpenseResponse])
async def list_expenses(
    start_date: date | None = None,
    end_date: date | None = None,
    repos: Repositories = Depends(get_repos),
) -> list[ExpenseResponse]:
    expenses = await repos.expenses.list()
    return [
        expense_response(e)
        for e in expenses
        if _in_period(e.expense_date, start_date, end_date)
    ]


# =============================================================================
# Packaging
# =============================================================================


@router.post(
    "/packaging",
    response_model=PackagingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_packaging(
    request: CreatePackagingRequest,
    repos: Repositories = Depends(get_repos),
) -> PackagingResponse:
    """Register a retail package option for unit economics."""
    packaging_id = await repos.packaging.create(Packaging(**request.model_dump()))
    return packaging_response(await repos.packaging.get(packaging_id))


@router.get("/packaging", response_model=list[PackagingResponse])
async def list_packaging(
    repos: Repositories = Depends(get_repos),
) -> list[PackagingResponse]:
    return [packaging_response(p) for p in await repos.packaging.list()]
