"""Check Stock Alerts Use Case: low-stock thresholds per variety and kind."""

from collections import defaultdict

from roastledger.application.dto.responses import StockAlertListResponse, StockAlertResponse
from roastledger.config import get_logger
from roastledger.core.entities import BeanVariety, StockAlert, StockKind
from roastledger.core.interfaces import Repositories

logger = get_logger(__name__)


class CheckStockAlertsUseCase:
    """
    Compare total quantity per (variety, kind) across locations with each
    alert setting. An alert fires when the total is at or below the threshold.
    """

    def __init__(self, repositories: Repositories | None = None):
        self._repositories = repositories

    def _get_repositories(self) -> Repositories:
        if self._repositories is None:
            from roastledger.infrastructure.storage import get_repositories

            self._repositories = get_repositories()
        return self._repositories

    async def execute(self) -> list[StockAlert]:
        """Execute stock alert check."""
        repos = self._get_repositories()

        totals: dict[tuple[BeanVariety, StockKind], float] = defaultdict(float)
        for item in await repos.stock.list():
            totals[(item.variety, item.kind)] += item.quantity_kg

        alerts = []
        for setting in await repos.alert_settings.list():
            current = totals.get((setting.variety, setting.kind), 0.0)
            if current <= setting.threshold_kg:
                alerts.append(
                    StockAlert(
                        alert_setting_id=setting.id,
                        variety=setting.variety,
                        kind=setting.kind,
                        threshold_kg=setting.threshold_kg,
                        current_kg=current,
                    )
                )

        if alerts:
            logger.warning(
                "low_stock_alerts",
                count=len(alerts),
                varieties=[f"{a.variety.value}/{a.kind.value}" for a in alerts],
            )
        return alerts

    def to_response(self, alerts: list[StockAlert]) -> StockAlertListResponse:
        """Convert result to API response."""
        return StockAlertListResponse(
            alerts=[
                StockAlertResponse(
                    alert_setting_id=a.alert_setting_id,
                    variety=a.variety.value,
                    kind=a.kind.value,
                    threshold_kg=a.threshold_kg,
                    current_kg=a.current_kg,
                )
                for a in alerts
            ],
            total=len(alerts),
        )
