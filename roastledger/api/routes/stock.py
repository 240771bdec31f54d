"""Stock item, ledger and low-stock alert endpoints."""

from fastapi import APIRouter, Depends, Response, status

from roastledger.api.dependencies import (
    get_adjust_stock_use_case,
    get_check_stock_alerts_use_case,
    get_create_stock_item_use_case,
    get_ledger,
    get_repos,
)
from roastledger.application.dto.converters import (
    alert_setting_response,
    ledger_entry_response,
    stock_item_response,
)
from roastledger.application.dto.requests import (
    AdjustStockRequest,
    CreateAlertSettingRequest,
    CreateStockItemRequest,
    UpdateStockItemRequest,
)
from roastledger.application.dto.responses import (
    AlertSettingResponse,
    ErrorResponse,
    StockAlertListResponse,
    StockItemResponse,
    StockLedgerResponse,
    StockListResponse,
    StockMutationResponse,
)
from roastledger.application.use_cases.adjust_stock import AdjustStockUseCase
from roastledger.application.use_cases.check_stock_alerts import CheckStockAlertsUseCase
from roastledger.application.use_cases.create_stock_item import CreateStockItemUseCase
from roastledger.core.entities import AlertSetting, BeanVariety, StockKind
from roastledger.core.interfaces import Repositories
from roastledger.core.services import WarehouseLedger

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.get("", response_model=StockListResponse)
async def list_stock(
    kind: StockKind | None = None,
    variety: BeanVariety | None = None,
    location: str | None = None,
    repos: Repositories = Depends(get_repos),
) -> StockListResponse:
    """List stock items, optionally filtered by kind, variety and location."""
    filters = {
        key: value
        for key, value in (("kind", kind), ("variety", variety), ("location", location))
        if value is not None
    }
    items = await repos.stock.list(filters or None)
    return StockListResponse(
        items=[stock_item_response(item) for item in items],
        total=len(items),
    )


@router.post(
    "",
    response_model=StockMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_stock_item(
    request: CreateStockItemRequest,
    use_case: CreateStockItemUseCase = Depends(get_create_stock_item_use_case),
) -> StockMutationResponse:
    """Create a stock item, booking any opening quantity as a manual adjustment."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


# Alert routes come before /{stock_item_id} so the paths do not collide
@router.get("/alerts", response_model=StockAlertListResponse)
async def check_alerts(
    use_case: CheckStockAlertsUseCase = Depends(get_check_stock_alerts_use_case),
) -> StockAlertListResponse:
    """Alert settings whose threshold has been reached."""
    alerts = await use_case.execute()
    return use_case.to_response(alerts)


@router.get("/alert-settings", response_model=list[AlertSettingResponse])
async def list_alert_settings(
    repos: Repositories = Depends(get_repos),
) -> list[AlertSettingResponse]:
    settings = await repos.alert_settings.list()
    return [alert_setting_response(s) for s in settings]


@router.post(
    "/alert-settings",
    response_model=AlertSettingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_alert_setting(
    request: CreateAlertSettingRequest,
    repos: Repositories = Depends(get_repos),
) -> AlertSettingResponse:
    """Set a low-stock threshold for a variety and stock kind."""
    setting_id = await repos.alert_settings.create(
        AlertSetting(
            variety=request.variety,
            kind=request.kind,
            threshold_kg=request.threshold_kg,
        )
    )
    return alert_setting_response(await repos.alert_settings.get(setting_id))


@router.delete(
    "/alert-settings/{setting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_alert_setting(
    setting_id: str,
    repos: Repositories = Depends(get_repos),
) -> Response:
    await repos.alert_settings.remove(setting_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{stock_item_id}",
    response_model=StockItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_stock_item(
    stock_item_id: str,
    repos: Repositories = Depends(get_repos),
) -> StockItemResponse:
    item = await repos.stock.get(stock_item_id)
    return stock_item_response(item)


@router.patch(
    "/{stock_item_id}",
    response_model=StockItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_stock_item(
    stock_item_id: str,
    request: UpdateStockItemRequest,
    repos: Repositories = Depends(get_repos),
) -> StockItemResponse:
    """Move a stock item to another location. Quantities only change via the ledger."""
    item = await repos.stock.update(stock_item_id, {"location": request.location})
    return stock_item_response(item)


@router.delete(
    "/{stock_item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_stock_item(
    stock_item_id: str,
    repos: Repositories = Depends(get_repos),
) -> Response:
    """Remove an empty stock item."""
    await repos.stock.remove(stock_item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{stock_item_id}/ledger",
    response_model=StockLedgerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_stock_ledger(
    stock_item_id: str,
    repos: Repositories = Depends(get_repos),
    ledger: WarehouseLedger = Depends(get_ledger),
) -> StockLedgerResponse:
    """Full ledger history of a stock item with a balance check."""
    item = await repos.stock.get(stock_item_id)
    entries = await ledger.entries_for(stock_item_id)
    return StockLedgerResponse(
        stock_item=stock_item_response(item),
        entries=[ledger_entry_response(e) for e in entries],
        ledger_balance=await ledger.balance_of(stock_item_id),
        balanced=await ledger.verify_balance(stock_item_id),
    )


@router.post(
    "/{stock_item_id}/adjust",
    response_model=StockMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def adjust_stock(
    stock_item_id: str,
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> StockMutationResponse:
    """Record a manual adjustment (stock count, spoilage, correction)."""
    result = await use_case.execute(stock_item_id, request)
    return use_case.to_response(result)
