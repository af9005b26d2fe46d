"""Integration tests for the exchange HTTP API."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from exchange.api.endpoints import get_exchange
from exchange.api.main import app
from exchange.engine import Exchange
from tests.helpers import ALICE, BOB

ALICE_HEADERS = {"X-Account": ALICE}
BOB_HEADERS = {"X-Account": BOB}


@pytest.fixture
def engine() -> Exchange:
    return Exchange()


@pytest.fixture
def client(engine: Exchange) -> Iterator[TestClient]:
    """Test client bound to a fresh exchange."""
    app.dependency_overrides[get_exchange] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client: TestClient) -> TestClient:
    """ALICE and BOB funded with 1000.0 each; ALICE seeded the pool with (1.0, 2.0)."""
    for headers in (ALICE_HEADERS, BOB_HEADERS):
        response = client.post(
            "/faucet",
            json={"amountToken1": 1_000_000_000, "amountToken2": 1_000_000_000},
            headers=headers,
        )
        assert response.status_code == 204
    response = client.post(
        "/provide", json={"amountToken1": 1_000_000, "amountToken2": 2_000_000}, headers=ALICE_HEADERS
    )
    assert response.status_code == 200
    return client


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestLedgerRoutes:
    def test_faucet_then_holdings(self, client):
        response = client.post(
            "/faucet", json={"amountToken1": 5_000_000, "amountToken2": "7000000"}, headers=ALICE_HEADERS
        )
        assert response.status_code == 204

        response = client.get("/holdings", headers=ALICE_HEADERS)
        assert response.status_code == 200
        assert response.json() == {"amountToken1": 5_000_000, "amountToken2": 7_000_000, "myShare": 0}

    def test_faucet_accepts_snake_case(self, client):
        response = client.post(
            "/faucet", json={"amount_token1": 1, "amount_token2": 2}, headers=ALICE_HEADERS
        )
        assert response.status_code == 204

    def test_holdings_are_per_account(self, client):
        client.post("/faucet", json={"amountToken1": 1, "amountToken2": 1}, headers=ALICE_HEADERS)
        response = client.get("/holdings", headers=BOB_HEADERS)
        assert response.json() == {"amountToken1": 0, "amountToken2": 0, "myShare": 0}

    def test_missing_account_header(self, client):
        response = client.get("/holdings")
        assert response.status_code == 422

    @pytest.mark.parametrize("bad", [-1, "abc", 1.5, True, 2**256])
    def test_invalid_amounts_rejected(self, client, engine, bad):
        response = client.post(
            "/faucet", json={"amountToken1": bad, "amountToken2": 1}, headers=ALICE_HEADERS
        )
        assert response.status_code == 422
        assert engine.get_my_holdings(ALICE).amount_token2 == 0


class TestPoolRoutes:
    def test_empty_pool_details(self, client):
        response = client.get("/pool")
        assert response.json() == {"totalToken1": 0, "totalToken2": 0, "totalShares": 0}

    def test_genesis_provide(self, seeded_client):
        response = seeded_client.get("/pool")
        assert response.json() == {
            "totalToken1": 1_000_000,
            "totalToken2": 2_000_000,
            "totalShares": 100_000_000,
        }
        holdings = seeded_client.get("/holdings", headers=ALICE_HEADERS).json()
        assert holdings["myShare"] == 100_000_000

    def test_equivalent_estimates(self, seeded_client):
        response = seeded_client.get("/estimate/equivalent/token2", params={"amount_token1": 500_000})
        assert response.json() == {"amount": 1_000_000}
        response = seeded_client.get("/estimate/equivalent/token1", params={"amount_token2": 1_000_000})
        assert response.json() == {"amount": 500_000}

    def test_provide_returns_share(self, seeded_client):
        response = seeded_client.post(
            "/provide", json={"amountToken1": 500_000, "amountToken2": 1_000_000}, headers=BOB_HEADERS
        )
        assert response.status_code == 200
        assert response.json() == {"share": 50_000_000}

    def test_unequal_provide(self, seeded_client, engine):
        response = seeded_client.post(
            "/provide", json={"amountToken1": 500_000, "amountToken2": 999_999}, headers=BOB_HEADERS
        )
        assert response.status_code == 400
        assert response.json() == {
            "error": "unequal_proportion",
            "detail": "Equivalent value of tokens not provided...",
        }
        assert engine.get_pool_details().total_shares == 100_000_000

    def test_withdraw_flow(self, seeded_client):
        seeded_client.post(
            "/provide", json={"amountToken1": 500_000, "amountToken2": 1_000_000}, headers=BOB_HEADERS
        )
        estimate = seeded_client.get("/estimate/withdraw", params={"share": 50_000_000}).json()
        assert estimate == {"amountToken1": 500_000, "amountToken2": 1_000_000}

        response = seeded_client.post("/withdraw", json={"share": 50_000_000}, headers=BOB_HEADERS)
        assert response.status_code == 200
        assert response.json() == estimate

    def test_withdraw_estimate_exceeds_total(self, seeded_client):
        response = seeded_client.get("/estimate/withdraw", params={"share": 100_000_001})
        assert response.status_code == 400
        assert response.json()["error"] == "share_exceeds_total"


class TestSwapRoutes:
    @pytest.fixture
    def deep_client(self, seeded_client: TestClient) -> TestClient:
        seeded_client.post(
            "/provide", json={"amountToken1": 500_000, "amountToken2": 1_000_000}, headers=BOB_HEADERS
        )
        return seeded_client

    def test_swap_estimates(self, deep_client):
        assert deep_client.get("/estimate/swap/token1", params={"amount_token1": 100_000}).json() == {
            "amount": 187_500
        }
        assert deep_client.get("/estimate/swap/token2", params={"amount_token2": 100_000}).json() == {
            "amount": 48_388
        }
        response = deep_client.get("/estimate/swap/token1/given-token2", params={"amount_token2": 187_500})
        assert response.json() == {"amount": 100_000}
        response = deep_client.get("/estimate/swap/token2/given-token1", params={"amount_token1": 48_388})
        assert response.json() == {"amount": 100_001}

    def test_given_out_too_large(self, deep_client):
        response = deep_client.get(
            "/estimate/swap/token1/given-token2", params={"amount_token2": 3_000_000}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "insufficient_pool_balance", "detail": "Insufficient pool balance"}

    def test_swap_token1(self, deep_client):
        response = deep_client.post("/swap/token1", json={"amount": 100_000}, headers=BOB_HEADERS)
        assert response.status_code == 200
        assert response.json() == {"amount": 187_500}
        pool = deep_client.get("/pool").json()
        assert (pool["totalToken1"], pool["totalToken2"]) == (1_600_000, 2_812_500)

    def test_swap_token2(self, deep_client):
        response = deep_client.post("/swap/token2", json={"amount": 100_000}, headers=BOB_HEADERS)
        assert response.json() == {"amount": 48_388}

    def test_zero_swap(self, deep_client):
        response = deep_client.post("/swap/token1", json={"amount": 0}, headers=BOB_HEADERS)
        assert response.status_code == 400
        assert response.json() == {"error": "zero_amount", "detail": "Amount cannot be zero!"}


class TestErrorMapping:
    def test_zero_liquidity(self, client):
        response = client.get("/estimate/swap/token1", params={"amount_token1": 1})
        assert response.status_code == 400
        assert response.json() == {"error": "zero_liquidity", "detail": "Zero Liquidity"}

    def test_insufficient_balance(self, client):
        response = client.post(
            "/provide", json={"amountToken1": 1, "amountToken2": 1}, headers=ALICE_HEADERS
        )
        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_balance"

    def test_arithmetic_overflow(self, client, engine):
        max_amount = 2**256 - 1
        client.post("/faucet", json={"amountToken1": max_amount, "amountToken2": 0}, headers=ALICE_HEADERS)

        response = client.post("/faucet", json={"amountToken1": 1, "amountToken2": 1}, headers=ALICE_HEADERS)

        assert response.status_code == 422
        assert response.json()["error"] == "arithmetic_error"
        assert engine.get_my_holdings(ALICE).amount_token2 == 0

    def test_negative_query_amount(self, client):
        response = client.get("/estimate/withdraw", params={"share": -1})
        assert response.status_code == 422

    def test_given_out_estimate_above_curve(self, client):
        client.post("/faucet", json={"amountToken1": 10, "amountToken2": 10}, headers=ALICE_HEADERS)
        client.post("/provide", json={"amountToken1": 1, "amountToken2": 1}, headers=ALICE_HEADERS)
        assert client.post("/swap/token1", json={"amount": 1}, headers=ALICE_HEADERS).json() == {"amount": 0}

        response = client.get("/estimate/swap/token1/given-token2", params={"amount_token2": 0})

        assert response.status_code == 422
        assert response.json()["error"] == "arithmetic_error"
