from __future__ import annotations

from functools import lru_cache

import httpx

from app.application.confidential_prediction_service import ConfidentialPredictionService
from app.application.health_service import HealthAggregator
from app.infrastructure.clients.confidential_compute import ConfidentialComputeClient
from app.infrastructure.clients.factory import ServiceClients, build_clients
from app.infrastructure.clients.market_data import MarketDataClient
from app.infrastructure.clients.prediction import PredictionClient
from app.infrastructure.clients.weather import WeatherClient
from app.infrastructure.config.settings import Settings, settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def get_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@lru_cache(maxsize=1)
def get_clients() -> ServiceClients:
    return build_clients(settings=get_settings(), http_client=get_http_client())


def get_prediction_client() -> PredictionClient:
    return get_clients().prediction


def get_market_data_client() -> MarketDataClient:
    return get_clients().market_data


def get_weather_client() -> WeatherClient:
    return get_clients().weather


def get_confidential_compute_client() -> ConfidentialComputeClient:
    return get_clients().confidential_compute


@lru_cache(maxsize=1)
def get_health_aggregator() -> HealthAggregator:
    return HealthAggregator(
        get_clients().all(),
        probe_timeout_seconds=get_settings().health_probe_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_confidential_prediction_service() -> ConfidentialPredictionService:
    clients = get_clients()
    return ConfidentialPredictionService(clients.prediction, clients.confidential_compute)
