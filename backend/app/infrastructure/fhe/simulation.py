from __future__ import annotations

import hashlib
import re

from app.domain.contracts import FHEBackend
from app.domain.entities import EncryptedValue


_LEADING_HEX = re.compile(r"[0-9a-fA-F]+")


def handle_to_int(handle: str) -> int:
    """Read the 8 hex digits after the `0x` prefix, stopping at the first non-hex character."""
    match = _LEADING_HEX.match(handle[2:10])
    if match is None:
        raise ValueError(f"Not a hex handle: {handle[:12]!r}")
    return int(match.group(0), 16)


def int_to_handle(value: int) -> EncryptedValue:
    encoded = f"0x{value:08x}"
    return EncryptedValue(data=encoded, handles=encoded)


class SimulationFHEBackend(FHEBackend):
    """Deterministic hash-based placeholder for an FHE SDK.

    This is NOT homomorphic encryption. `encrypt32` is a SHA-256 digest of the
    value, `decrypt` reads back a truncated integer from the handle, and
    `add`/`mul` combine those truncated integers. It only keeps the demo
    endpoints runnable without a real FHE library; nothing it produces is secret.
    """

    name = "simulation"
    simulated = True

    def __init__(self, public_key: str):
        self._public_key = public_key

    async def start(self) -> None:
        return None

    def public_key(self) -> str:
        return self._public_key

    def encrypt32(self, value: int) -> EncryptedValue:
        digest = hashlib.sha256(str(value).encode("utf-8")).hexdigest()
        return EncryptedValue(data=f"0x{digest}", handles=f"0x{digest[:32]}")

    def decrypt(self, ciphertext: str) -> int:
        return handle_to_int(ciphertext) % 1000

    def add(self, left: EncryptedValue, right: EncryptedValue) -> EncryptedValue:
        return int_to_handle(handle_to_int(left.handles) + handle_to_int(right.handles))

    def mul(self, left: EncryptedValue, right: EncryptedValue) -> EncryptedValue:
        return int_to_handle(handle_to_int(left.handles) * handle_to_int(right.handles))
