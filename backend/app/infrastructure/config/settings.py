from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


REQUIRED_SETTINGS_FIELDS = ["gemini_api_key", "weather_api_key", "fhevm_rpc_url", "fhevm_chain_id"]

DEMO_PUBLIC_KEY = "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "development"
    log_level: str = "INFO"
    backend_host: str = "0.0.0.0"
    backend_port: int = 3001
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    startup_health_check: bool = True
    health_probe_timeout_seconds: int = 35

    # Gemini
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout_seconds: int = 30
    gemini_max_output_tokens: int = 150
    gemini_temperature: float = 0.7

    # CoinGecko
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    market_timeout_seconds: int = 15

    # WeatherAPI
    weather_api_key: str | None = None
    weather_base_url: str = "http://api.weatherapi.com/v1"
    weather_timeout_seconds: int = 15

    # FHEVM network + FHE backend
    fhevm_rpc_url: str | None = None
    fhevm_chain_id: int | None = None
    rpc_timeout_seconds: int = 10
    fhe_backend: Literal["simulation", "tenseal"] = "simulation"
    fhe_public_key: str = DEMO_PUBLIC_KEY
    tenseal_poly_modulus_degree: int = 4096
    tenseal_plain_modulus: int = 1032193

    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def missing_required(self) -> list[str]:
        missing: list[str] = []
        for field in REQUIRED_SETTINGS_FIELDS:
            value = getattr(self, field, None)
            if value is None or value == "":
                missing.append(field.upper())
        return missing


settings = Settings()
