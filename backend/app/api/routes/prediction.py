from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_prediction_client
from app.infrastructure.clients.prediction import PredictionClient
from app.schemas.prediction import FetchPredictionRequest, FetchPredictionResponse

router = APIRouter(prefix="/api", tags=["prediction"])


@router.post("/fetch-prediction", response_model=FetchPredictionResponse)
async def fetch_prediction(
    request: FetchPredictionRequest,
    client: PredictionClient = Depends(get_prediction_client),
) -> FetchPredictionResponse:
    prediction = await client.get_prediction(request.domain.strip(), request.inputs)
    return FetchPredictionResponse(prediction=prediction)
