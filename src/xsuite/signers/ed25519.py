"""
ED25519 signer implementation.

Account addresses are the raw 32-byte Ed25519 public key.
"""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..runtime.address import Address
from .signer import Signer, SignerError


class Ed25519Signer(Signer):
    """ED25519 signer holding its private key in memory."""

    def __init__(self, private_key: Ed25519PrivateKey):
        self.private_key = private_key
        self.public_key = private_key.public_key()
        super().__init__(Address(self.get_public_key()))

    @classmethod
    def from_secret_key(cls, secret_key: bytes) -> Ed25519Signer:
        """
        Create a signer from a 32-byte secret key (seed).

        Raises:
            SignerError: If the key is not 32 bytes
        """
        if len(secret_key) != 32:
            raise SignerError(f"Ed25519 secret key must be 32 bytes, got {len(secret_key)}")
        return cls(Ed25519PrivateKey.from_private_bytes(secret_key))

    @classmethod
    def from_secret_key_hex(cls, secret_key_hex: str) -> Ed25519Signer:
        try:
            secret_key = bytes.fromhex(secret_key_hex)
        except ValueError as e:
            raise SignerError(f"Invalid hex secret key: {e}")
        return cls.from_secret_key(secret_key)

    @classmethod
    def generate(cls) -> Ed25519Signer:
        return cls(Ed25519PrivateKey.generate())

    def get_public_key(self) -> bytes:
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    async def sign(self, data: bytes) -> bytes:
        return self.private_key.sign(data)

    def verify(self, signature: bytes, data: bytes) -> bool:
        """
        Verify a signature produced by this signer.

        Returns:
            True if signature is valid
        """
        try:
            self.public_key.verify(signature, data)
            return True
        except InvalidSignature:
            return False


def verify_signature(address: Address, signature: bytes, data: bytes) -> bool:
    """Verify a signature against the public key embedded in an address."""
    try:
        Ed25519PublicKey.from_public_bytes(address.raw).verify(signature, data)
        return True
    except InvalidSignature:
        return False
