from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from app.domain.errors import UpstreamTimeoutError

T = TypeVar("T")


async def run_with_timeout(coro: Awaitable[T], timeout_seconds: float, service: str) -> T:
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        raise UpstreamTimeoutError(service, f"Timed out after {timeout_seconds}s") from exc
