from __future__ import annotations

import asyncio
import math
from typing import Literal, Sequence

import httpx

from app.domain.contracts import FHEBackend
from app.domain.entities import (
    CONFIDENTIAL_COMPUTE_RPC_SERVICE,
    CONFIDENTIAL_COMPUTE_SERVICE,
    ConnectionStatus,
    EncryptedBatch,
    EncryptedPrediction,
    EncryptedValue,
    InitStatus,
)
from app.domain.errors import ConfidentialComputeError, InvalidResponseError
from app.infrastructure.clients.base import BaseClient
from app.infrastructure.config.settings import Settings
from app.infrastructure.logging import get_logger

logger = get_logger(__name__)

ComputeState = Literal["uninitialized", "initializing", "ready"]

DOMAIN_WEIGHTS: dict[str, list[int]] = {
    "financial": [40, 35, 25],
    "gaming": [50, 30, 20],
    "iot": [30, 40, 30],
}
DEFAULT_WEIGHTS = [33, 33, 34]

BASE_CONFIDENCE = 85
MISSING_INPUT_PENALTY = 10
EXPECTED_INPUTS = 3
SELF_TEST_VALUE = 42


def domain_weights(domain: str) -> list[int]:
    return DOMAIN_WEIGHTS.get(domain, DEFAULT_WEIGHTS)


def confidence_score(input_count: int) -> int:
    return BASE_CONFIDENCE - max(0, EXPECTED_INPUTS - input_count) * MISSING_INPUT_PENALTY


class ConfidentialComputeClient(BaseClient):
    """FHE operations over a pluggable backend plus an FHEVM RPC probe.

    SDK failures are reported as `confidential-compute`; the health probe reports
    as `confidential-compute-rpc`.
    """

    service = CONFIDENTIAL_COMPUTE_RPC_SERVICE
    display_name = "FHEVM RPC"
    timeout_setting = "rpc_timeout_seconds"
    required_settings_fields = ["fhevm_rpc_url"]

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient, backend: FHEBackend):
        super().__init__(settings, http_client)
        self.backend = backend
        self.state: ComputeState = "uninitialized"
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> InitStatus:
        async with self._init_lock:
            if self.state != "ready":
                self.state = "initializing"
                try:
                    await self.backend.start()
                except Exception as exc:  # noqa: BLE001
                    self.state = "uninitialized"
                    logger.error("fhe_backend_init_failed", backend=self.backend.name, error=str(exc))
                    raise ConfidentialComputeError(
                        CONFIDENTIAL_COMPUTE_SERVICE,
                        f"FHE SDK initialization failed: {exc}",
                        code="SDK_INIT_ERROR",
                    ) from exc
                self.state = "ready"
                if self.backend.simulated:
                    logger.warning("fhe_simulation_mode", backend=self.backend.name)
                else:
                    logger.info("fhe_backend_ready", backend=self.backend.name)

        return InitStatus(
            service=CONFIDENTIAL_COMPUTE_SERVICE,
            chain_id=self.settings.fhevm_chain_id,
            simulation=self.backend.simulated,
        )

    async def _ensure_ready(self) -> None:
        if self.state != "ready":
            await self.initialize()

    async def public_key(self) -> str:
        await self._ensure_ready()
        return self.backend.public_key() or "0x"

    async def encrypt(self, values: Sequence[float]) -> EncryptedBatch:
        await self._ensure_ready()
        try:
            encrypted = [self.backend.encrypt32(math.floor(value)) for value in values]
        except Exception as exc:  # noqa: BLE001
            raise ConfidentialComputeError(
                CONFIDENTIAL_COMPUTE_SERVICE, f"FHE encryption failed: {exc}", code="ENCRYPTION_ERROR"
            ) from exc
        return EncryptedBatch(encrypted=encrypted)

    async def decrypt(self, ciphertext: str) -> int:
        await self._ensure_ready()
        try:
            return int(self.backend.decrypt(ciphertext))
        except Exception as exc:  # noqa: BLE001
            raise ConfidentialComputeError(
                CONFIDENTIAL_COMPUTE_SERVICE, f"FHE decryption failed: {exc}", code="DECRYPTION_ERROR"
            ) from exc

    async def compute_encrypted_prediction(
        self,
        encrypted_inputs: Sequence[EncryptedValue],
        domain: str,
    ) -> EncryptedPrediction:
        await self._ensure_ready()
        weights = domain_weights(domain)
        try:
            result = self.backend.encrypt32(0)
            for encrypted_input, weight in zip(encrypted_inputs, weights):
                weighted = self.backend.mul(encrypted_input, self.backend.encrypt32(weight))
                result = self.backend.add(result, weighted)
            confidence = self.backend.encrypt32(confidence_score(len(encrypted_inputs)))
        except Exception as exc:  # noqa: BLE001
            raise ConfidentialComputeError(
                CONFIDENTIAL_COMPUTE_SERVICE,
                f"FHE prediction computation failed: {exc}",
                code="COMPUTATION_ERROR",
            ) from exc
        return EncryptedPrediction(prediction=result, confidence=confidence, domain=domain)

    async def _probe(self) -> ConnectionStatus:
        chain_id = await self._rpc_chain_id()
        expected = self.settings.fhevm_chain_id
        if expected is not None and chain_id != expected:
            return ConnectionStatus.failed(
                self.service,
                f"RPC reports chain id {chain_id}, expected {expected}",
                "CHAIN_ID_MISMATCH",
            )

        await self._ensure_ready()
        try:
            self.backend.decrypt(self.backend.encrypt32(SELF_TEST_VALUE).data)
        except Exception as exc:  # noqa: BLE001
            return ConnectionStatus.failed(self.service, f"FHE self-test failed: {exc}", "SDK_SELF_TEST_ERROR")

        return ConnectionStatus.connected(self.service, chain_id=chain_id, simulation=self.backend.simulated)

    async def _rpc_chain_id(self) -> int:
        response = await self._request(
            "POST",
            str(self.settings.fhevm_rpc_url),
            json={"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []},
        )
        payload = self._json(response)
        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, str):
            raise InvalidResponseError(self.service, "FHEVM RPC returned no chain id")
        try:
            return int(result, 16)
        except ValueError as exc:
            raise InvalidResponseError(self.service, f"FHEVM RPC returned malformed chain id {result!r}") from exc
