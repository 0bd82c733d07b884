from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_health_aggregator
from app.application.health_service import HealthAggregator
from app.domain.entities import HealthReport

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthReport, response_model_exclude_none=True)
async def health(
    response: Response,
    aggregator: HealthAggregator = Depends(get_health_aggregator),
) -> HealthReport:
    report = await aggregator.check()
    if not report.success:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return report
