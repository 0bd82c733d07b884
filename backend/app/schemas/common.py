from __future__ import annotations

from pydantic import BaseModel


class ErrorEnvelope(BaseModel):
    success: bool = False
    service: str
    error: str
    code: str
