from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_confidential_compute_client, get_confidential_prediction_service
from app.application.confidential_prediction_service import ConfidentialPredictionService
from app.infrastructure.clients.confidential_compute import ConfidentialComputeClient
from app.schemas.confidential import (
    ComputeEncryptedPredictionRequest,
    ComputeEncryptedPredictionResponse,
    ConfidentialPredictionRequest,
    ConfidentialPredictionResponse,
    EncryptDataRequest,
    EncryptDataResponse,
    PublicDecryptRequest,
    PublicDecryptResponse,
    PublicKeyResponse,
)

router = APIRouter(prefix="/api", tags=["confidential-compute"])


@router.get("/fhe-public-key", response_model=PublicKeyResponse)
async def fhe_public_key(
    client: ConfidentialComputeClient = Depends(get_confidential_compute_client),
) -> PublicKeyResponse:
    return PublicKeyResponse(public_key=await client.public_key())


@router.post("/encrypt-data", response_model=EncryptDataResponse)
async def encrypt_data(
    request: EncryptDataRequest,
    client: ConfidentialComputeClient = Depends(get_confidential_compute_client),
) -> EncryptDataResponse:
    return EncryptDataResponse(encrypted=await client.encrypt(request.data))


@router.post("/public-decrypt", response_model=PublicDecryptResponse)
async def public_decrypt(
    request: PublicDecryptRequest,
    client: ConfidentialComputeClient = Depends(get_confidential_compute_client),
) -> PublicDecryptResponse:
    return PublicDecryptResponse(decrypted_value=await client.decrypt(request.ciphertext.strip()))


@router.post("/compute-encrypted-prediction", response_model=ComputeEncryptedPredictionResponse)
async def compute_encrypted_prediction(
    request: ComputeEncryptedPredictionRequest,
    client: ConfidentialComputeClient = Depends(get_confidential_compute_client),
) -> ComputeEncryptedPredictionResponse:
    prediction = await client.compute_encrypted_prediction(request.encrypted_inputs, request.domain.strip())
    return ComputeEncryptedPredictionResponse(prediction=prediction)


@router.post("/confidential-prediction", response_model=ConfidentialPredictionResponse)
async def confidential_prediction(
    request: ConfidentialPredictionRequest,
    service: ConfidentialPredictionService = Depends(get_confidential_prediction_service),
) -> ConfidentialPredictionResponse:
    return ConfidentialPredictionResponse(data=await service.predict(request.inputs, request.domain.strip()))
