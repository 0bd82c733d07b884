from __future__ import annotations

from typing import Sequence

from app.domain.entities import ConfidentialPrediction, EncryptedPredictionSummary, PredictionInputs
from app.infrastructure.clients.confidential_compute import ConfidentialComputeClient
from app.infrastructure.clients.prediction import PredictionClient


class ConfidentialPredictionService:
    """Encrypts the inputs, asks the text model, then runs the encrypted weighted sum."""

    def __init__(self, prediction_client: PredictionClient, compute_client: ConfidentialComputeClient):
        self._prediction_client = prediction_client
        self._compute_client = compute_client

    async def predict(self, inputs: Sequence[float], domain: str) -> ConfidentialPrediction:
        encrypted = await self._compute_client.encrypt(inputs)

        padded = list(inputs[:3]) + [None] * (3 - min(len(inputs), 3))
        ai_prediction = await self._prediction_client.get_prediction(
            domain,
            PredictionInputs(input1=padded[0], input2=padded[1], input3=padded[2]),
        )

        encrypted_prediction = await self._compute_client.compute_encrypted_prediction(encrypted.encrypted, domain)
        return ConfidentialPrediction(
            ai_prediction=ai_prediction,
            encrypted_prediction=EncryptedPredictionSummary(
                domain=domain,
                timestamp=encrypted_prediction.timestamp,
            ),
        )
