from __future__ import annotations

from typing import Any

import httpx

from app.domain.contracts import ServiceClient
from app.domain.entities import ConnectionStatus
from app.domain.errors import (
    InvalidResponseError,
    NotConfiguredError,
    ProviderHTTPError,
    RateLimitedError,
    ServiceError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from app.infrastructure.config.settings import Settings
from app.infrastructure.logging import get_logger

logger = get_logger(__name__)


class BaseClient(ServiceClient):
    """Shared request/response handling for vendor clients.

    Every outbound call goes through `_request`, which turns transport failures and
    non-2xx answers into `ServiceError` subclasses. Subclasses refine the status
    mapping in `_map_status_error` and implement `_probe` for health checks.
    """

    display_name: str = ""
    timeout_setting: str = ""
    required_settings_fields: list[str] = []

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client

    @property
    def timeout_seconds(self) -> float:
        return float(getattr(self.settings, self.timeout_setting, 15))

    def missing_settings(self) -> list[str]:
        missing: list[str] = []
        for field in self.required_settings_fields:
            value = getattr(self.settings, field, None)
            if value is None or value == "":
                missing.append(f"Missing env: {field.upper()}")
        return missing

    def _ensure_configured(self) -> None:
        missing = self.missing_settings()
        if missing:
            raise NotConfiguredError(self.service, "; ".join(missing))

    async def test_connection(self) -> ConnectionStatus:
        try:
            self._ensure_configured()
            return await self._probe()
        except ServiceError as exc:
            logger.warning("connection_probe_failed", service=self.service, code=exc.code, error=exc.message)
            return ConnectionStatus.failed(service=self.service, error=exc.message, code=exc.code)

    async def _probe(self) -> ConnectionStatus:
        raise NotImplementedError

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        subject: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self.http_client.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                self.service, f"{self.display_name} API timeout - service unreachable"
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamUnavailableError(
                self.service, f"{self.display_name} API unreachable - check network connection"
            ) from exc

        if response.status_code >= 400:
            error = self._map_status_error(response, subject=subject)
            logger.warning(
                "vendor_request_failed",
                service=self.service,
                code=error.code,
                status_code=response.status_code,
            )
            raise error
        return response

    def _map_status_error(self, response: httpx.Response, subject: str | None = None) -> ServiceError:
        _ = subject
        if response.status_code == 429:
            return RateLimitedError(self.service, f"{self.display_name} rate limit reached - retry later")
        detail = self._extract_detail(response) or f"{self.display_name} API error"
        return ProviderHTTPError(self.service, detail, status_code=response.status_code)

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise InvalidResponseError(self.service, f"{self.display_name} returned invalid JSON") from exc

    @staticmethod
    def _extract_detail(response: httpx.Response) -> str | None:
        try:
            data = response.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            return str(message) if message else None
        if isinstance(error, str) and error:
            return error
        return None
