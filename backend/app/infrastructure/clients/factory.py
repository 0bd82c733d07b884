from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.domain.contracts import FHEBackend, ServiceClient
from app.infrastructure.clients.confidential_compute import ConfidentialComputeClient
from app.infrastructure.clients.market_data import MarketDataClient
from app.infrastructure.clients.prediction import PredictionClient
from app.infrastructure.clients.weather import WeatherClient
from app.infrastructure.config.settings import Settings
from app.infrastructure.fhe.simulation import SimulationFHEBackend
from app.infrastructure.fhe.tenseal_backend import TensealFHEBackend


@dataclass(frozen=True)
class ServiceClients:
    prediction: PredictionClient
    market_data: MarketDataClient
    weather: WeatherClient
    confidential_compute: ConfidentialComputeClient

    def all(self) -> list[ServiceClient]:
        return [self.prediction, self.market_data, self.weather, self.confidential_compute]


def build_fhe_backend(settings: Settings) -> FHEBackend:
    backend = (settings.fhe_backend or "simulation").strip().lower()
    if backend == "tenseal":
        return TensealFHEBackend(
            poly_modulus_degree=settings.tenseal_poly_modulus_degree,
            plain_modulus=settings.tenseal_plain_modulus,
        )
    return SimulationFHEBackend(public_key=settings.fhe_public_key)


def build_clients(settings: Settings, http_client: httpx.AsyncClient) -> ServiceClients:
    return ServiceClients(
        prediction=PredictionClient(settings, http_client),
        market_data=MarketDataClient(settings, http_client),
        weather=WeatherClient(settings, http_client),
        confidential_compute=ConfidentialComputeClient(settings, http_client, build_fhe_backend(settings)),
    )
