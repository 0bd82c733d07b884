from __future__ import annotations

import asyncio
from typing import Iterable

from app.application.timeout import run_with_timeout
from app.domain.contracts import ServiceClient
from app.domain.entities import (
    CONFIDENTIAL_COMPUTE_RPC_SERVICE,
    MARKET_DATA_SERVICE,
    ConnectionStatus,
    HealthReport,
)
from app.domain.errors import ServiceError
from app.infrastructure.logging import get_logger

logger = get_logger(__name__)

# CoinGecko's public tier rate-limits aggressively; the FHEVM network is optional for the demo.
NON_CRITICAL_SERVICES = frozenset({MARKET_DATA_SERVICE, CONFIDENTIAL_COMPUTE_RPC_SERVICE})


def critical_failures(
    report: HealthReport,
    non_critical: Iterable[str] = NON_CRITICAL_SERVICES,
) -> dict[str, ConnectionStatus]:
    tolerated = set(non_critical)
    return {
        name: status
        for name, status in report.services.items()
        if not status.success and name not in tolerated
    }


class HealthAggregator:
    def __init__(
        self,
        clients: list[ServiceClient],
        probe_timeout_seconds: float,
        non_critical: Iterable[str] = NON_CRITICAL_SERVICES,
    ):
        self._clients = clients
        self._probe_timeout_seconds = probe_timeout_seconds
        self._non_critical = frozenset(non_critical)

    async def check(self) -> HealthReport:
        statuses = await asyncio.gather(*(self._probe(client) for client in self._clients))
        services = {client.service: status for client, status in zip(self._clients, statuses)}
        report = HealthReport(success=True, services=services)
        report.success = not critical_failures(report, self._non_critical)
        logger.info(
            "health_check_completed",
            success=report.success,
            failed=[name for name, status in services.items() if not status.success],
        )
        return report

    async def _probe(self, client: ServiceClient) -> ConnectionStatus:
        try:
            return await run_with_timeout(
                client.test_connection(),
                timeout_seconds=self._probe_timeout_seconds,
                service=client.service,
            )
        except ServiceError as exc:
            return ConnectionStatus.failed(service=client.service, error=exc.message, code=exc.code)
        except Exception as exc:  # noqa: BLE001
            logger.exception("health_probe_crashed", service=client.service)
            return ConnectionStatus.failed(
                service=client.service,
                error=f"Health probe failed: {exc}",
                code="HEALTH_CHECK_ERROR",
            )
