"""
Transaction signers.
"""

from .signer import Signer, SignerError, DummySigner
from .ed25519 import Ed25519Signer, verify_signature

__all__ = [
    "Signer",
    "SignerError",
    "DummySigner",
    "Ed25519Signer",
    "verify_signature",
]
