"""
Raw transaction serialization and signing.

The signature covers the compact JSON serialization of the unsigned wire
fields, in the order given by ``unsigned_fields``.
"""

from __future__ import annotations
import base64
import json
from dataclasses import replace
from typing import Union

from ..runtime.address import address_like_to_bech
from ..runtime.errors import EncodingError
from ..signers.signer import SignerError
from .encoder import intent_to_tx
from .types import RawTx, TxIntent, unsigned_fields

BroadTx = Union[TxIntent, RawTx]


def serialize_for_signing(tx: RawTx) -> bytes:
    """Bytes the sender signs."""
    return json.dumps(unsigned_fields(tx), separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def build_unsigned_raw_tx(intent: TxIntent) -> RawTx:
    """
    Convert an intent to its wire form with an empty signature.

    Raises:
        EncodingError: On a negative value
    """
    tx = intent_to_tx(intent)
    if tx.value < 0:
        raise EncodingError(f"Transaction value cannot be negative: {tx.value}")
    return RawTx(
        nonce=tx.nonce,
        value=str(tx.value),
        receiver=address_like_to_bech(tx.receiver),
        sender=address_like_to_bech(tx.sender),
        gas_price=tx.gas_price,
        gas_limit=tx.gas_limit,
        chain_id=tx.chain_id,
        version=tx.version,
        signature="",
        data=base64.b64encode(tx.data.encode("utf-8")).decode("ascii") if tx.data is not None else None,
    )


async def broad_tx_to_raw_tx(tx: BroadTx) -> RawTx:
    """
    Sign an intent, or pass an already signed raw transaction through.

    Raises:
        SignerError: If the sender cannot sign or signing fails
    """
    if isinstance(tx, RawTx):
        return tx
    unsigned = build_unsigned_raw_tx(tx)
    sign = getattr(tx.sender, "sign", None)
    if sign is None:
        raise SignerError(f"Sender {unsigned.sender} cannot sign transactions")
    signature = await sign(serialize_for_signing(unsigned))
    return replace(unsigned, signature=bytes(signature).hex())
