"""
Tests for the HTTP endpoints:
- /v1/historicaltrades
- /v1/positions
- /v1/equity_chart
- /health
"""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from fakes import FakeConnection, FakeDataSource, make_deal, make_order
from tradeshare.api.main import app
from tradeshare.infrastructure.config import Settings, get_settings

ACCOUNT_ID = "865d3a4d-3803-486d-bdf3-a85679d9fad2"


@pytest.fixture
def datasource():
    now = datetime.now(timezone.utc)
    connection = FakeConnection(
        orders=[make_order("O1", "P1"), make_order("O2", "P1")],
        deals={"P1": [
            make_deal("D1", "P1", "DEAL_ENTRY_IN", now - timedelta(minutes=50)),
            make_deal("D2", "P1", "DEAL_ENTRY_OUT", now - timedelta(minutes=30)),
        ]},
        positions=[{"id": "46214692", "symbol": "GBPUSD", "volume": 0.07}]
    )
    return FakeDataSource(connection, metrics={"balance": 10000.0, "trades": 12})


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_historical_trades(client: AsyncClient, datasource: FakeDataSource):
    resp = await client.get(f"/v1/historicaltrades?account_id={ACCOUNT_ID}&history_range=1&offset=20")
    assert resp.status_code == 200

    trades = resp.json()["trades"]
    assert len(trades) == 1
    assert trades[0]["id"] == "D2"
    assert trades[0]["createdAt"] == "30 minutes ago"
    assert set(trades[0]) == {"id", "type", "profit", "symbol", "createdAt", "volume", "time"}
    assert datasource.connection.order_calls[0][2] == 20


@pytest.mark.asyncio
async def test_historical_trades_requires_parameters(client: AsyncClient):
    resp = await client.get(f"/v1/historicaltrades?account_id={ACCOUNT_ID}")
    assert resp.status_code == 400
    assert resp.json()["error"] == "account_id or history range parameter are required"


@pytest.mark.asyncio
async def test_historical_trades_invalid_range(client: AsyncClient, datasource: FakeDataSource):
    resp = await client.get(f"/v1/historicaltrades?account_id={ACCOUNT_ID}&history_range=9")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid history range", "category": "InvalidRangeError"}
    assert datasource.opened == []


@pytest.mark.asyncio
async def test_historical_trades_upstream_error(client: AsyncClient, datasource: FakeDataSource):
    datasource.connect_error = Exception()
    datasource.connect_error.details = "E_AUTH"

    resp = await client.get(f"/v1/historicaltrades?account_id={ACCOUNT_ID}&history_range=week")
    assert resp.status_code == 401
    assert resp.json()["category"] == "BrokerAuthenticationFailed"


@pytest.mark.asyncio
async def test_open_positions(client: AsyncClient):
    resp = await client.get(f"/v1/positions?account_id={ACCOUNT_ID}")
    assert resp.status_code == 200
    assert resp.json()["positions"][0]["symbol"] == "GBPUSD"


@pytest.mark.asyncio
async def test_positions_require_account(client: AsyncClient):
    resp = await client.get("/v1/positions")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please provide an account id"


@pytest.mark.asyncio
async def test_equity_chart(client: AsyncClient):
    resp = await client.get(f"/v1/equity_chart?account_id={ACCOUNT_ID}")
    assert resp.status_code == 200
    assert resp.json()["metrics"]["balance"] == 10000.0


@pytest.fixture
async def tokenless_client():
    """Client wired to the real datasource dependency with no MetaApi token configured."""
    app.dependency_overrides[get_settings] = lambda: Settings(metaapi_token=None)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_missing_parameters_reported_before_token_check(tokenless_client: AsyncClient):
    resp = await tokenless_client.get("/v1/historicaltrades")
    assert resp.status_code == 400
    assert resp.json()["error"] == "account_id or history range parameter are required"


@pytest.mark.asyncio
async def test_invalid_range_reported_before_token_check(tokenless_client: AsyncClient):
    resp = await tokenless_client.get(f"/v1/historicaltrades?account_id={ACCOUNT_ID}&history_range=year")
    assert resp.status_code == 400
    assert resp.json()["category"] == "InvalidRangeError"


@pytest.mark.asyncio
async def test_missing_account_reported_before_token_check(tokenless_client: AsyncClient):
    resp = await tokenless_client.get("/v1/equity_chart")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please provide an account id"


@pytest.mark.asyncio
async def test_valid_request_without_token_is_unavailable(tokenless_client: AsyncClient):
    resp = await tokenless_client.get(f"/v1/historicaltrades?account_id={ACCOUNT_ID}&history_range=1")
    assert resp.status_code == 503
    assert resp.json()["error"] == "MetaApi token is not configured"
