from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities import ConnectionStatus, EncryptedValue


class ServiceClient(ABC):
    service: str

    @abstractmethod
    async def test_connection(self) -> ConnectionStatus:
        """Probe the vendor. Never raises; failures come back as a failed status."""
        raise NotImplementedError


class FHEBackend(ABC):
    name: str
    simulated: bool

    @abstractmethod
    async def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def public_key(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def encrypt32(self, value: int) -> EncryptedValue:
        raise NotImplementedError

    @abstractmethod
    def decrypt(self, ciphertext: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def add(self, left: EncryptedValue, right: EncryptedValue) -> EncryptedValue:
        raise NotImplementedError

    @abstractmethod
    def mul(self, left: EncryptedValue, right: EncryptedValue) -> EncryptedValue:
        raise NotImplementedError
