"""API tests for stock endpoints, backed by the in-memory store."""

import pytest
from httpx import ASGITransport, AsyncClient

from roastledger.api.main import app


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _create(client: AsyncClient, **overrides) -> dict:
    body = {
        "kind": "roasted_bean",
        "variety": "arabica",
        "location": "Gudang Roasted Bean",
        "initial_quantity_kg": 10,
        "unit_cost": 250000,
        **overrides,
    }
    response = await client.post("/api/stock", json=body)
    assert response.status_code == 201
    return response.json()


class TestStockItems:
    """Tests for /api/stock and /api/stock/{id}."""

    async def test_create_with_opening_stock(self, client: AsyncClient):
        data = await _create(client)

        assert data["stock_item"]["quantity_kg"] == 10
        assert data["entry"]["origin_type"] == "manual_adjustment"
        assert data["entry"]["origin"]["unit_cost"] == 250000

    async def test_create_empty(self, client: AsyncClient):
        data = await _create(client, initial_quantity_kg=0, unit_cost=None)
        assert data["entry"] is None

    async def test_invalid_kind(self, client: AsyncClient):
        response = await client.post(
            "/api/stock",
            json={"kind": "instant", "variety": "arabica", "location": "Gudang"},
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_list_with_filter(self, client: AsyncClient):
        await _create(client)
        await _create(client, kind="green_bean", location="Gudang Green Bean")

        response = await client.get("/api/stock", params={"kind": "green_bean"})

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["kind"] == "green_bean"

    async def test_get_unknown(self, client: AsyncClient):
        response = await client.get("/api/stock/ST-missing")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOT_FOUND"
        assert body["path"] == "/api/stock/ST-missing"
        assert body["hint"]

    async def test_relocate(self, client: AsyncClient):
        stock_id = (await _create(client))["stock_item"]["id"]

        response = await client.patch(
            f"/api/stock/{stock_id}", json={"location": "Toko Blok M"}
        )

        assert response.status_code == 200
        assert response.json()["location"] == "Toko Blok M"
        assert response.json()["quantity_kg"] == 10

    async def test_cannot_delete_stock_holding_beans(self, client: AsyncClient):
        stock_id = (await _create(client))["stock_item"]["id"]

        response = await client.delete(f"/api/stock/{stock_id}")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_delete_empty(self, client: AsyncClient):
        stock_id = (await _create(client, initial_quantity_kg=0))["stock_item"]["id"]

        assert (await client.delete(f"/api/stock/{stock_id}")).status_code == 204
        assert (await client.get(f"/api/stock/{stock_id}")).status_code == 404


class TestLedgerAndAdjustments:
    async def test_adjust_and_ledger(self, client: AsyncClient):
        stock_id = (await _create(client))["stock_item"]["id"]

        response = await client.post(
            f"/api/stock/{stock_id}/adjust",
            json={"delta_kg": -2.5, "reason": "Sample for cupping"},
        )
        assert response.status_code == 201
        assert response.json()["stock_item"]["quantity_kg"] == 7.5

        ledger = (await client.get(f"/api/stock/{stock_id}/ledger")).json()
        assert [e["delta"] for e in ledger["entries"]] == [10, -2.5]
        assert ledger["ledger_balance"] == 7.5
        assert ledger["balanced"] is True

    async def test_overdraw_is_conflict(self, client: AsyncClient):
        stock_id = (await _create(client))["stock_item"]["id"]

        response = await client.post(
            f"/api/stock/{stock_id}/adjust", json={"delta_kg": -20, "reason": "Spoilage"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"
        stock = (await client.get(f"/api/stock/{stock_id}")).json()
        assert stock["quantity_kg"] == 10

    async def test_correcting_adjustment(self, client: AsyncClient):
        stock_id = (await _create(client))["stock_item"]["id"]

        response = await client.post(
            f"/api/stock/{stock_id}/adjust",
            json={"delta_kg": -12, "reason": "Reconciliation", "correcting": True},
        )

        assert response.status_code == 201
        assert response.json()["entry"]["correcting"] is True
        assert response.json()["stock_item"]["quantity_kg"] == -2

    async def test_adjust_requires_reason(self, client: AsyncClient):
        stock_id = (await _create(client))["stock_item"]["id"]
        response = await client.post(f"/api/stock/{stock_id}/adjust", json={"delta_kg": 1})
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "body",
        [
            '{"delta_kg": NaN, "reason": "Recount"}',
            '{"delta_kg": Infinity, "reason": "Recount"}',
            '{"delta_kg": 5, "reason": "Recount", "unit_cost": Infinity}',
        ],
    )
    async def test_non_finite_numbers_rejected(self, client: AsyncClient, body: str):
        stock_id = (await _create(client))["stock_item"]["id"]

        response = await client.post(
            f"/api/stock/{stock_id}/adjust",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        stock = (await client.get(f"/api/stock/{stock_id}")).json()
        assert stock["quantity_kg"] == 10


class TestAlerts:
    async def test_alert_settings_and_alerts(self, client: AsyncClient):
        await _create(client, initial_quantity_kg=4)

        created = await client.post(
            "/api/stock/alert-settings",
            json={"variety": "arabica", "kind": "roasted_bean", "threshold_kg": 5},
        )
        assert created.status_code == 201
        setting_id = created.json()["id"]

        alerts = (await client.get("/api/stock/alerts")).json()
        assert alerts["total"] == 1
        assert alerts["alerts"][0]["current_kg"] == 4

        assert (await client.delete(f"/api/stock/alert-settings/{setting_id}")).status_code == 204
        assert (await client.get("/api/stock/alerts")).json()["total"] == 0
