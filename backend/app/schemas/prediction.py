from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.entities import PredictionInputs, PredictionResult, utc_now_iso


class FetchPredictionRequest(BaseModel):
    domain: str = Field(min_length=1)
    inputs: PredictionInputs


class FetchPredictionResponse(BaseModel):
    success: bool = True
    prediction: PredictionResult
    timestamp: str = Field(default_factory=utc_now_iso)
