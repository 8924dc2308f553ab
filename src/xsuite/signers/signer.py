"""
Base signer interface.

A signer is a capability: it exposes the address it signs for and an
asynchronous ``sign`` operation, so key material may live anywhere (in
memory, behind a keystore prompt, in a remote service).
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from ..runtime.address import Address, AddressLike, address_like_to_address
from ..runtime.errors import XsuiteError


class SignerError(XsuiteError):
    """Base exception for signer operations."""
    pass


class Signer(ABC):
    """
    Base signer interface.

    Any object with an ``address`` attribute is address-like, so signers can
    be passed wherever an address is expected.
    """

    def __init__(self, address: AddressLike):
        self.address: Address = address_like_to_address(address)

    @abstractmethod
    async def sign(self, data: bytes) -> bytes:
        """
        Sign serialized transaction bytes.

        Args:
            data: Bytes to sign

        Returns:
            Signature bytes

        Raises:
            SignerError: If signing fails
        """
        pass

    def __str__(self) -> str:
        return self.address.bech

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.address.bech}')"


class DummySigner(Signer):
    """
    Signer producing an all-zero signature.

    Used against the simulated network, which does not check signatures.
    """

    SIGNATURE_LENGTH = 64

    async def sign(self, data: bytes) -> bytes:
        return bytes(self.SIGNATURE_LENGTH)
