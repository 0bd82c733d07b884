from __future__ import annotations

import asyncio

import httpx
import uvicorn

from app.application.health_service import HealthAggregator, critical_failures
from app.domain.entities import HealthReport
from app.infrastructure.clients.factory import build_clients
from app.infrastructure.config.settings import Settings, settings
from app.infrastructure.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def run_startup_checks(cfg: Settings) -> HealthReport:
    # Separate client: the serving loop builds its own pool.
    async with httpx.AsyncClient() as http_client:
        clients = build_clients(cfg, http_client)
        aggregator = HealthAggregator(clients.all(), probe_timeout_seconds=cfg.health_probe_timeout_seconds)
        return await aggregator.check()


def validate_startup(cfg: Settings) -> int:
    """Return a process exit code: 0 when the server may start."""
    missing = cfg.missing_required()
    if missing:
        logger.error("startup_failed", reason="missing_environment", missing=missing)
        return 1

    if not cfg.startup_health_check:
        return 0

    report = asyncio.run(run_startup_checks(cfg))
    failures = critical_failures(report)
    if failures:
        for name, status in failures.items():
            logger.error("startup_failed", reason="service_unavailable", service=name, code=status.code, error=status.error)
        return 1

    for name, status in report.services.items():
        if not status.success:
            logger.warning("service_degraded", service=name, code=status.code, error=status.error)
    return 0


def main() -> None:
    configure_logging(settings.log_level)
    exit_code = validate_startup(settings)
    if exit_code:
        raise SystemExit(exit_code)

    logger.info("server_starting", host=settings.backend_host, port=settings.backend_port)
    uvicorn.run("app.main:app", host=settings.backend_host, port=settings.backend_port)


if __name__ == "__main__":
    main()
