from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.deps import (
    get_confidential_compute_client,
    get_confidential_prediction_service,
    get_health_aggregator,
    get_market_data_client,
    get_prediction_client,
)
from app.application.confidential_prediction_service import ConfidentialPredictionService
from app.application.health_service import HealthAggregator
from app.domain.contracts import ServiceClient
from app.domain.entities import ConnectionStatus
from app.infrastructure.clients.confidential_compute import ConfidentialComputeClient
from app.infrastructure.clients.market_data import MarketDataClient
from app.infrastructure.clients.prediction import PredictionClient
from app.infrastructure.fhe.simulation import SimulationFHEBackend
from app.main import app


def _gemini(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Score trend: UP 12%"}]}}]})


class StubClient(ServiceClient):
    def __init__(self, service: str, success: bool = True):
        self.service = service
        self._success = success

    async def test_connection(self) -> ConnectionStatus:
        if self._success:
            return ConnectionStatus.connected(self.service)
        return ConnectionStatus.failed(self.service, error="WeatherAPI key invalid or expired", code="401")


class ExplodingMarketClient:
    async def get_price(self, symbol: str):
        raise RuntimeError(f"boom for {symbol}")


@pytest.fixture
def http_clients() -> list[httpx.AsyncClient]:
    return []


@pytest.fixture
def vendor_http(http_clients):
    def build(handler) -> httpx.AsyncClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        http_clients.append(http_client)
        return http_client

    return build


@pytest.fixture
def compute_client(settings, vendor_http) -> ConfidentialComputeClient:
    http_client = vendor_http(lambda request: httpx.Response(404))
    return ConfidentialComputeClient(settings, http_client, SimulationFHEBackend(public_key="0xabc"))


@pytest.fixture
def api(compute_client, http_clients):
    app.dependency_overrides[get_confidential_compute_client] = lambda: compute_client
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
        for http_client in http_clients:
            client.portal.call(http_client.aclose)
    app.dependency_overrides.clear()


def test_public_decrypt_returns_integer(api) -> None:
    response = api.post("/api/public-decrypt", json={"ciphertext": "0x1234..."})

    assert response.status_code == 200
    assert response.json() == {"success": True, "decryptedValue": 0x1234 % 1000}


def test_missing_field_is_validation_error(api) -> None:
    response = api.post("/api/public-decrypt", json={})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["service"] == "api-validation"
    assert body["error"].startswith("Invalid request: ciphertext")


def test_fhe_public_key(api) -> None:
    response = api.get("/api/fhe-public-key")

    assert response.status_code == 200
    assert response.json() == {"success": True, "publicKey": "0xabc"}


def test_encrypt_then_compute_round_trip(api) -> None:
    encrypted = api.post("/api/encrypt-data", json={"data": [50000, 2500, 7.5]})
    assert encrypted.status_code == 200
    batch = encrypted.json()["encrypted"]
    assert len(batch["encrypted"]) == 3
    assert all(item["data"].startswith("0x") and item["handles"].startswith("0x") for item in batch["encrypted"])

    computed = api.post(
        "/api/compute-encrypted-prediction",
        json={"encryptedInputs": batch["encrypted"], "domain": " financial "},
    )

    assert computed.status_code == 200
    prediction = computed.json()["prediction"]
    assert prediction["domain"] == "financial"
    assert set(prediction["prediction"]) == {"data", "handles"}
    assert set(prediction["confidence"]) == {"data", "handles"}


def test_confidential_prediction_combines_both_paths(api, settings, vendor_http, compute_client) -> None:
    prediction_client = PredictionClient(settings, vendor_http(_gemini))
    app.dependency_overrides[get_confidential_prediction_service] = lambda: ConfidentialPredictionService(
        prediction_client, compute_client
    )

    response = api.post("/api/confidential-prediction", json={"inputs": [1500, 30], "domain": "gaming"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["aiPrediction"]["prediction"] == "Score trend: UP 12%"
    assert data["aiPrediction"]["domain"] == "gaming"
    assert data["encryptedPrediction"]["encrypted"] is True
    assert data["encryptedPrediction"]["domain"] == "gaming"


def test_fetch_prediction(api, settings, vendor_http) -> None:
    app.dependency_overrides[get_prediction_client] = lambda: PredictionClient(settings, vendor_http(_gemini))

    response = api.post(
        "/api/fetch-prediction",
        json={"domain": "gaming", "inputs": {"input1": "1500", "input2": "30", "input3": "4.2"}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["prediction"]["model"] == "gemini-2.0-flash"
    assert body["timestamp"]


def test_fetch_prediction_requires_domain(api) -> None:
    response = api.post("/api/fetch-prediction", json={"domain": "", "inputs": {}})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_service_error_status_is_mirrored(api, settings, vendor_http) -> None:
    http_client = vendor_http(lambda request: httpx.Response(429))
    app.dependency_overrides[get_market_data_client] = lambda: MarketDataClient(settings, http_client)

    response = api.get("/api/fetch-market/bitcoin")

    assert response.status_code == 429
    assert response.json() == {
        "success": False,
        "service": "market-data",
        "error": "CoinGecko rate limit reached - retry later",
        "code": "429",
    }


def test_fetch_market_success(api, settings, vendor_http) -> None:
    http_client = vendor_http(lambda request: httpx.Response(200, json={"ethereum": {"usd": 3100.0}}))
    app.dependency_overrides[get_market_data_client] = lambda: MarketDataClient(settings, http_client)

    response = api.get("/api/fetch-market/ethereum")

    assert response.status_code == 200
    assert response.json()["data"]["symbol"] == "ethereum"
    assert response.json()["data"]["price"] == 3100.0


def test_malformed_market_payload_keeps_vendor_envelope(api, settings, vendor_http) -> None:
    http_client = vendor_http(lambda request: httpx.Response(200, json={"bitcoin": {"usd": "n/a"}}))
    app.dependency_overrides[get_market_data_client] = lambda: MarketDataClient(settings, http_client)

    response = api.get("/api/fetch-market/bitcoin")

    assert response.status_code == 502
    assert response.json()["service"] == "market-data"
    assert response.json()["code"] == "INVALID_RESPONSE"


def test_unhandled_exception_is_server_error(api) -> None:
    app.dependency_overrides[get_market_data_client] = lambda: ExplodingMarketClient()

    response = api.get("/api/fetch-market/bitcoin")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "service": "server",
        "error": "Internal server error",
        "code": "SERVER_ERROR",
    }


def test_health_is_200_when_only_non_critical_services_fail(api) -> None:
    clients = [StubClient("prediction"), StubClient("market-data", success=False), StubClient("weather")]
    app.dependency_overrides[get_health_aggregator] = lambda: HealthAggregator(clients, probe_timeout_seconds=1)

    response = api.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["services"]["prediction"] == {"success": True, "service": "prediction", "status": "connected"}


def test_health_is_503_when_critical_service_fails(api) -> None:
    clients = [StubClient("prediction"), StubClient("weather", success=False)]
    app.dependency_overrides[get_health_aggregator] = lambda: HealthAggregator(clients, probe_timeout_seconds=1)

    response = api.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["services"]["weather"]["code"] == "401"
