from __future__ import annotations

from typing import Callable

import httpx
import pytest

from app.infrastructure.config.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key="test-gemini-key",
        weather_api_key="test-weather-key",
        fhevm_rpc_url="https://rpc.fhevm.test",
        fhevm_chain_id=8009,
        fhe_backend="simulation",
    )


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    def build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return build
