from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.entities import CamelModel, ConfidentialPrediction, EncryptedBatch, EncryptedPrediction, EncryptedValue


class PublicKeyResponse(CamelModel):
    success: bool = True
    public_key: str = Field(alias="publicKey")


class EncryptDataRequest(BaseModel):
    data: list[float]


class EncryptDataResponse(BaseModel):
    success: bool = True
    encrypted: EncryptedBatch


class PublicDecryptRequest(BaseModel):
    ciphertext: str = Field(min_length=1)


class PublicDecryptResponse(CamelModel):
    success: bool = True
    decrypted_value: int = Field(alias="decryptedValue")


class ComputeEncryptedPredictionRequest(CamelModel):
    encrypted_inputs: list[EncryptedValue] = Field(alias="encryptedInputs")
    domain: str = Field(min_length=1)


class ComputeEncryptedPredictionResponse(BaseModel):
    success: bool = True
    prediction: EncryptedPrediction


class ConfidentialPredictionRequest(BaseModel):
    inputs: list[float]
    domain: str = Field(min_length=1)


class ConfidentialPredictionResponse(BaseModel):
    success: bool = True
    data: ConfidentialPrediction
