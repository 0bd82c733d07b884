from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


ServiceName = Literal[
    "prediction",
    "market-data",
    "weather",
    "confidential-compute",
    "confidential-compute-rpc",
]

PREDICTION_SERVICE: ServiceName = "prediction"
MARKET_DATA_SERVICE: ServiceName = "market-data"
WEATHER_SERVICE: ServiceName = "weather"
CONFIDENTIAL_COMPUTE_SERVICE: ServiceName = "confidential-compute"
CONFIDENTIAL_COMPUTE_RPC_SERVICE: ServiceName = "confidential-compute-rpc"

Domain = Literal["financial", "gaming", "iot"]
KNOWN_DOMAINS: tuple[str, ...] = ("financial", "gaming", "iot")

InputValue = str | float | int | None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConnectionStatus(CamelModel):
    success: bool
    service: str
    status: str | None = None
    error: str | None = None
    code: str | None = None
    chain_id: int | None = Field(default=None, alias="chainId")
    simulation: bool | None = None

    @classmethod
    def connected(cls, service: str, status: str = "connected", **extra) -> "ConnectionStatus":
        return cls(success=True, service=service, status=status, **extra)

    @classmethod
    def failed(cls, service: str, error: str, code: str) -> "ConnectionStatus":
        return cls(success=False, service=service, error=error, code=code)


class HealthReport(BaseModel):
    success: bool
    services: dict[str, ConnectionStatus]
    timestamp: str = Field(default_factory=utc_now_iso)


class PredictionInputs(BaseModel):
    input1: InputValue = None
    input2: InputValue = None
    input3: InputValue = None

    def as_list(self) -> list[InputValue]:
        return [self.input1, self.input2, self.input3]


class PredictionResult(BaseModel):
    prediction: str
    model: str
    confidence: float = Field(ge=0.0, le=1.0)
    domain: str


class MarketQuote(BaseModel):
    symbol: str
    price: float | None = None
    change_24h: float | None = None
    market_cap: float | None = None
    volume_24h: float | None = None
    timestamp: str = Field(default_factory=utc_now_iso)


class TrendingCoin(BaseModel):
    id: str
    name: str
    symbol: str
    rank: int | None = None


class TrendingList(BaseModel):
    trending: list[TrendingCoin] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_now_iso)


class WeatherReport(BaseModel):
    city: str
    country: str
    temperature: float
    humidity: float
    pressure: float
    description: str
    main: str
    wind_speed: float
    timestamp: str = Field(default_factory=utc_now_iso)


class ForecastEntry(BaseModel):
    datetime: str
    temperature: float
    humidity: float
    pressure: float
    description: str


class WeatherForecast(BaseModel):
    city: str
    country: str
    forecast: list[ForecastEntry] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_now_iso)


class EncryptedValue(BaseModel):
    data: str
    handles: str


class EncryptedBatch(BaseModel):
    encrypted: list[EncryptedValue]
    timestamp: int = Field(default_factory=epoch_millis)


class EncryptedPrediction(BaseModel):
    prediction: EncryptedValue
    confidence: EncryptedValue
    domain: str
    timestamp: int = Field(default_factory=epoch_millis)


class InitStatus(CamelModel):
    success: bool = True
    service: str
    status: str = "initialized"
    chain_id: int | None = Field(default=None, alias="chainId")
    simulation: bool


class EncryptedPredictionSummary(BaseModel):
    domain: str
    timestamp: int
    encrypted: bool = True


class ConfidentialPrediction(CamelModel):
    ai_prediction: PredictionResult = Field(alias="aiPrediction")
    encrypted_prediction: EncryptedPredictionSummary = Field(alias="encryptedPrediction")
