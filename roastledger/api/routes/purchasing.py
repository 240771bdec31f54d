"""Supplier, purchase order and goods receipt endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from roastledger.api.dependencies import (
    get_create_purchase_order_use_case,
    get_receive_purchase_use_case,
    get_repos,
    get_update_purchase_order_status_use_case,
)
from roastledger.application.dto.converters import supplier_response
from roastledger.application.dto.requests import (
    CreatePurchaseOrderRequest,
    CreateSupplierRequest,
    ReceivePurchaseRequest,
    UpdatePurchaseOrderStatusRequest,
)
from roastledger.application.dto.responses import (
    ErrorResponse,
    PurchaseOrderResponse,
    ReceivePurchaseResponse,
    SupplierResponse,
)
from roastledger.application.use_cases.manage_purchase_order import (
    CreatePurchaseOrderUseCase,
    UpdatePurchaseOrderStatusUseCase,
)
from roastledger.application.use_cases.receive_purchase import ReceivePurchaseUseCase
from roastledger.core.entities import POStatus, Supplier
from roastledger.core.interfaces import Repositories

router = APIRouter(prefix="/api/purchasing", tags=["purchasing"])


# =============================================================================
# Suppliers
# =============================================================================


@router.get("/suppliers", response_model=list[SupplierResponse])
async def list_suppliers(
    repos: Repositories = Depends(get_repos),
) -> list[SupplierResponse]:
    suppliers = await repos.suppliers.list()
    return [supplier_response(s) for s in suppliers]


@router.post(
    "/suppliers",
    response_model=SupplierResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_supplier(
    request: CreateSupplierRequest,
    repos: Repositories = Depends(get_repos),
) -> SupplierResponse:
    supplier_id = await repos.suppliers.create(Supplier(**request.model_dump()))
    return supplier_response(await repos.suppliers.get(supplier_id))


@router.get(
    "/suppliers/{supplier_id}",
    response_model=SupplierResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_supplier(
    supplier_id: str,
    repos: Repositories = Depends(get_repos),
) -> SupplierResponse:
    return supplier_response(await repos.suppliers.get(supplier_id))


@router.put(
    "/suppliers/{supplier_id}",
    response_model=SupplierResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_supplier(
    supplier_id: str,
    request: CreateSupplierRequest,
    repos: Repositories = Depends(get_repos),
) -> SupplierResponse:
    """Replace a supplier's details."""
    supplier = await repos.suppliers.update(supplier_id, request.model_dump())
    return supplier_response(supplier)


@router.delete(
    "/suppliers/{supplier_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_supplier(
    supplier_id: str,
    repos: Repositories = Depends(get_repos),
) -> Response:
    await repos.suppliers.remove(supplier_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Purchase orders
# =============================================================================


@router.post(
    "/orders",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_purchase_order(
    request: CreatePurchaseOrderRequest,
    use_case: CreatePurchaseOrderUseCase = Depends(get_create_purchase_order_use_case),
) -> PurchaseOrderResponse:
    """Create a pending purchase order."""
    order = await use_case.execute(request)
    return await use_case.to_response(order)


@router.get("/orders", response_model=list[PurchaseOrderResponse])
async def list_purchase_orders(
    status_filter: POStatus | None = Query(default=None, alias="status"),
    supplier_id: str | None = None,
    use_case: CreatePurchaseOrderUseCase = Depends(get_create_purchase_order_use_case),
    repos: Repositories = Depends(get_repos),
) -> list[PurchaseOrderResponse]:
    """List purchase orders with receipt progress."""
    filters: dict[str, object] = {}
    if status_filter is not None:
        filters["status"] = status_filter
    if supplier_id is not None:
        filters["supplier_id"] = supplier_id

    orders = await repos.purchase_orders.list(filters or None)
    return [await use_case.to_response(order) for order in orders]


@router.get(
    "/orders/{purchase_order_id}",
    response_model=PurchaseOrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_purchase_order(
    purchase_order_id: str,
    use_case: CreatePurchaseOrderUseCase = Depends(get_create_purchase_order_use_case),
    repos: Repositories = Depends(get_repos),
) -> PurchaseOrderResponse:
    order = await repos.purchase_orders.get(purchase_order_id)
    return await use_case.to_response(order)


@router.patch(
    "/orders/{purchase_order_id}/status",
    response_model=PurchaseOrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_purchase_order_status(
    purchase_order_id: str,
    request: UpdatePurchaseOrderStatusRequest,
    use_case: UpdatePurchaseOrderStatusUseCase = Depends(
        get_update_purchase_order_status_use_case
    ),
) -> PurchaseOrderResponse:
    """Approve, reject or complete a purchase order."""
    order = await use_case.execute(purchase_order_id, request)
    return await use_case.to_response(order)


@router.post(
    "/receive",
    response_model=ReceivePurchaseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def receive_purchase(
    request: ReceivePurchaseRequest,
    use_case: ReceivePurchaseUseCase = Depends(get_receive_purchase_use_case),
) -> ReceivePurchaseResponse:
    """Receive green beans against an approved purchase order line."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
