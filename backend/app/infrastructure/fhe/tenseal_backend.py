from __future__ import annotations

import asyncio
import hashlib
from typing import Any

from app.domain.contracts import FHEBackend
from app.domain.entities import EncryptedValue
from app.domain.errors import DependencyMissingError


class TensealFHEBackend(FHEBackend):
    """BFV encryption through TenSEAL.

    Each value is a one-slot BFV vector. `data` holds the serialized ciphertext as
    hex, `handles` a digest of it. The context keeps the secret key in-process, so
    `decrypt` is only meaningful for ciphertexts produced by this backend.
    """

    name = "tenseal"
    simulated = False

    def __init__(self, poly_modulus_degree: int = 4096, plain_modulus: int = 1032193):
        self.poly_modulus_degree = poly_modulus_degree
        self.plain_modulus = plain_modulus
        self._ts: Any = None
        self._context: Any = None

    async def start(self) -> None:
        if self._context is not None:
            return
        try:
            import tenseal
        except ImportError as exc:
            raise DependencyMissingError(
                "tenseal is not installed. Install the 'fhe' extra or set FHE_BACKEND=simulation"
            ) from exc

        self._ts = tenseal
        # Key generation is CPU-bound.
        self._context = await asyncio.to_thread(
            tenseal.context,
            tenseal.SCHEME_TYPE.BFV,
            poly_modulus_degree=self.poly_modulus_degree,
            plain_modulus=self.plain_modulus,
        )

    def public_key(self) -> str:
        raw = self._context.serialize(
            save_public_key=True,
            save_secret_key=False,
            save_galois_keys=False,
            save_relin_keys=False,
        )
        return f"0x{raw.hex()}"

    def encrypt32(self, value: int) -> EncryptedValue:
        return self._wrap(self._ts.bfv_vector(self._context, [int(value)]))

    def decrypt(self, ciphertext: str) -> int:
        return int(self._load(ciphertext).decrypt()[0])

    def add(self, left: EncryptedValue, right: EncryptedValue) -> EncryptedValue:
        return self._wrap(self._load(left.data) + self._load(right.data))

    def mul(self, left: EncryptedValue, right: EncryptedValue) -> EncryptedValue:
        return self._wrap(self._load(left.data) * self._load(right.data))

    def _load(self, hex_data: str) -> Any:
        raw = bytes.fromhex(hex_data[2:] if hex_data.startswith("0x") else hex_data)
        return self._ts.bfv_vector_from(self._context, raw)

    @staticmethod
    def _wrap(vector: Any) -> EncryptedValue:
        raw = vector.serialize()
        return EncryptedValue(data=f"0x{raw.hex()}", handles=f"0x{hashlib.sha256(raw).hexdigest()[:32]}")
