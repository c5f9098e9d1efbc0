"""Tests for the HTTP API.

The quote service and position reader are replaced through
app.dependency_overrides, so no request leaves the process.
"""

import asyncio
from dataclasses import replace

import httpx
import pytest
from fastapi.testclient import TestClient

from smartroute.amm.uniswap_v2 import MockUniswapV2Quoter
from smartroute.api.endpoints import get_position_reader, get_service
from smartroute.api.main import MAX_REQUEST_SIZE, app
from smartroute.constants import Q96, Q128
from smartroute.exceptions import QuoteCancelledError
from smartroute.math.liquidity_math import get_tokens_from_liquidity
from smartroute.positions import Position, PositionView
from tests.helpers import DAI, TEST_CONFIG, USDC, WETH, make_engine, make_service


def quote_payload(**overrides) -> dict:
    payload = {
        "inputAsset": WETH,
        "outputAsset": USDC,
        "amountIn": "1.5",
        "decimalsIn": 18,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def client():
    """Client whose quote service prices every V2 hop 1:1 and has no V3 pools."""
    service = make_service(engine=make_engine(v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1))))
    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class CancelledService:
    async def quote(self, *args, **kwargs):
        raise QuoteCancelledError("superseded")


class FakePositionReader:
    def __init__(self, fail: bool = False):
        self.fail = fail

    async def position_view(self, token_id: int):
        if self.fail:
            raise ConnectionError("rpc down")
        position = Position(
            token_id=token_id,
            token0=USDC,
            token1=WETH,
            fee=500,
            tick_lower=-10,
            tick_upper=10,
            liquidity=123,
        )
        return position, PositionView(1, 2, 3, 4, True)

    async def position_ids(self, owner: str):
        if self.fail:
            raise ConnectionError("rpc down")
        return [7, 42]


class TestQuoteEndpoint:
    def test_quote(self, client):
        response = client.post("/quote", json=quote_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["bestQuote"]["protocol"] == "V2"
        assert data["bestQuote"]["outputAmount"] == "1500000000000000000"
        assert data["bestQuote"]["route"] == [
            {"inputAsset": WETH, "outputAsset": USDC, "protocol": "V2", "fee": None}
        ]
        assert data["bestQuote"]["priceImpact"] == 0.0
        assert data["v3Quote"] is None
        assert data["alternativeQuotes"] == []

    def test_same_asset_is_bad_request(self, client):
        response = client.post("/quote", json=quote_payload(outputAsset=WETH))
        assert response.status_code == 400

    def test_too_many_fractional_digits_is_bad_request(self, client):
        response = client.post("/quote", json=quote_payload(amountIn="1.5", decimalsIn=0))
        assert response.status_code == 400

    def test_no_protocol_enabled_is_bad_request(self, client):
        response = client.post("/quote", json=quote_payload(v2Enabled=False, v3Enabled=False))
        assert response.status_code == 400

    def test_zero_amount_is_not_found(self, client):
        response = client.post("/quote", json=quote_payload(amountIn="0"))
        assert response.status_code == 404

    def test_no_route_is_not_found(self, client):
        response = client.post("/quote", json=quote_payload(v2Enabled=False))
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "overrides",
        [
            {"amountIn": "abc"},
            {"amountIn": 1.5},
            {"inputAsset": "0x1234"},
            {"decimalsIn": 100},
        ],
    )
    def test_schema_violation(self, client, overrides):
        response = client.post("/quote", json=quote_payload(**overrides))
        assert response.status_code == 422

    def test_superseded_is_conflict(self):
        app.dependency_overrides[get_service] = lambda: CancelledService()
        try:
            response = TestClient(app).post("/quote", json=quote_payload())
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 409


def post_concurrently(payloads: list[dict], stagger: float = 0.0) -> list[httpx.Response]:
    """POST each payload to /quote on one event loop, starting them stagger seconds apart."""

    async def run() -> list[httpx.Response]:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:

            async def post(index: int, payload: dict) -> httpx.Response:
                await asyncio.sleep(index * stagger)
                return await http.post("/quote", json=payload)

            return await asyncio.gather(*(post(i, p) for i, p in enumerate(payloads)))

    return asyncio.run(run())


class TestConcurrentClients:
    @pytest.fixture(autouse=True)
    def debounced_service(self):
        config = replace(TEST_CONFIG, debounce_seconds=0.2)
        engine = make_engine(v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1)), config=config)
        service = make_service(engine=engine, config=config)
        app.dependency_overrides[get_service] = lambda: service
        try:
            yield service
        finally:
            app.dependency_overrides.clear()

    def test_unrelated_requests_both_succeed(self):
        first, second = post_concurrently(
            [quote_payload(), quote_payload(inputAsset=DAI, amountIn="2")], stagger=0.02
        )

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["bestQuote"]["outputAmount"] == "1500000000000000000"
        assert second.json()["bestQuote"]["outputAmount"] == "2000000000000000000"

    def test_distinct_client_ids_both_succeed(self):
        first, second = post_concurrently(
            [quote_payload(clientId="a"), quote_payload(clientId="b", amountIn="2")],
            stagger=0.02,
        )

        assert (first.status_code, second.status_code) == (200, 200)

    def test_same_client_id_supersedes(self):
        first, second = post_concurrently(
            [quote_payload(clientId="a"), quote_payload(clientId="a", amountIn="2")],
            stagger=0.02,
        )

        assert first.status_code == 409
        assert second.status_code == 200
        assert second.json()["bestQuote"]["outputAmount"] == "2000000000000000000"


class TestBlocksEndpoint:
    def test_new_block(self, client):
        client.post("/blocks", json={"blockNumber": 100})
        client.post("/quote", json=quote_payload())

        response = client.post("/blocks", json={"blockNumber": 101})

        assert response.status_code == 200
        assert response.json() == {"evicted": 1}

    def test_negative_block_rejected(self, client):
        assert client.post("/blocks", json={"blockNumber": -1}).status_code == 422


class TestPositionEndpoints:
    def test_amounts(self, client):
        response = client.post(
            "/positions/amounts",
            json={
                "liquidity": str(10**18),
                "sqrtPriceX96": str(Q96),
                "tickLower": -600,
                "tickUpper": 600,
            },
        )

        assert response.status_code == 200
        amount0, amount1 = get_tokens_from_liquidity(10**18, Q96, -600, 600)
        assert response.json() == {"amount0": str(amount0), "amount1": str(amount1)}

    def test_amounts_inverted_range(self, client):
        response = client.post(
            "/positions/amounts",
            json={"liquidity": "1", "sqrtPriceX96": str(Q96), "tickLower": 600, "tickUpper": -600},
        )
        assert response.status_code == 422

    def test_fees_below_range_wraparound(self, client):
        response = client.post(
            "/positions/fees",
            json={
                "liquidity": str(Q128),
                "currentTick": -100,
                "tickLower": -60,
                "tickUpper": 60,
                "feeGrowthGlobalX128": "5",
                "feeGrowthOutsideLowerX128": "10",
                "feeGrowthOutsideUpperX128": "2",
                "feeGrowthInsideLastX128": "3",
                "tokensOwed": "1",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"unclaimedFees": "6"}

    def test_on_chain_position(self):
        app.dependency_overrides[get_position_reader] = lambda: FakePositionReader()
        try:
            response = TestClient(app).get("/positions/42")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        data = response.json()
        assert data["tokenId"] == 42
        assert data["liquidity"] == "123"
        assert (data["amount0"], data["amount1"]) == ("1", "2")
        assert (data["unclaimedFees0"], data["unclaimedFees1"]) == ("3", "4")
        assert data["inRange"] is True

    def test_on_chain_position_failure(self):
        app.dependency_overrides[get_position_reader] = lambda: FakePositionReader(fail=True)
        try:
            response = TestClient(app).get("/positions/42")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 502

    def test_owner_positions(self):
        app.dependency_overrides[get_position_reader] = lambda: FakePositionReader()
        try:
            response = TestClient(app).get(f"/owners/{WETH}/positions")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json() == {"owner": WETH, "tokenIds": [7, 42]}

    def test_owner_positions_bad_address(self):
        app.dependency_overrides[get_position_reader] = lambda: FakePositionReader()
        try:
            response = TestClient(app).get("/owners/0x1234/positions")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 422

    def test_owner_positions_failure(self):
        app.dependency_overrides[get_position_reader] = lambda: FakePositionReader(fail=True)
        try:
            response = TestClient(app).get(f"/owners/{WETH}/positions")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 502


class TestRequestLimitsAndHealth:
    def test_oversized_request_returns_413(self, client):
        response = client.post(
            "/quote",
            json=quote_payload(),
            headers={"Content-Length": str(MAX_REQUEST_SIZE + 1)},
        )
        assert response.status_code == 413
        assert response.json()["detail"] == "Request too large"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
