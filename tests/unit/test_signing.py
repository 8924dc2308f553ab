"""
Tests for signers and raw transaction building.
"""

import base64
import json

import pytest

from helpers import mk_address, mk_signer
from xsuite.runtime.errors import EncodingError
from xsuite.signers import DummySigner, Ed25519Signer, SignerError, verify_signature
from xsuite.tx import (
    CallContractTx, RawTx, TransferTx, broad_tx_to_raw_tx, build_unsigned_raw_tx,
    serialize_for_signing,
)

ENVELOPE = {"nonce": 1, "gas_price": 1_000_000_000, "gas_limit": 50_000, "chain_id": "chain"}


class TestEd25519Signer:
    """Test the in-memory Ed25519 signer."""

    def test_deterministic_address(self):
        assert mk_signer(1).address == mk_signer(1).address
        assert mk_signer(1).address != mk_signer(2).address

    def test_address_is_public_key(self):
        signer = mk_signer(3)
        assert signer.address.raw == signer.get_public_key()

    @pytest.mark.asyncio
    async def test_sign_and_verify(self):
        signer = mk_signer(1)
        signature = await signer.sign(b"payload")
        assert len(signature) == 64
        assert signer.verify(signature, b"payload")
        assert not signer.verify(signature, b"other")
        assert verify_signature(signer.address, signature, b"payload")

    def test_bad_secret_key(self):
        with pytest.raises(SignerError, match="32 bytes"):
            Ed25519Signer.from_secret_key(b"\x01" * 16)
        with pytest.raises(SignerError, match="Invalid hex"):
            Ed25519Signer.from_secret_key_hex("zz")

    def test_generate(self):
        assert Ed25519Signer.generate().address != Ed25519Signer.generate().address


class TestDummySigner:
    """Test the simulator signer."""

    @pytest.mark.asyncio
    async def test_zero_signature(self):
        signer = DummySigner(mk_address(5))
        assert await signer.sign(b"anything") == bytes(64)
        assert signer.address == mk_address(5)


class TestRawTx:
    """Test the wire form of transactions."""

    def test_unsigned_fields_order(self):
        sender = mk_signer(1)
        tx = CallContractTx(sender=sender, callee=mk_address(2), func_name="f", value=10, **ENVELOPE)
        raw = build_unsigned_raw_tx(tx)

        serialized = json.loads(serialize_for_signing(raw))
        assert list(serialized) == [
            "nonce", "value", "receiver", "sender", "gasPrice", "gasLimit", "data", "chainID", "version",
        ]
        assert serialized["value"] == "10"
        assert serialized["data"] == base64.b64encode(b"f").decode()
        assert serialized["version"] == 1
        assert serialized["receiver"] == mk_address(2).bech
        assert serialized["sender"] == sender.address.bech

    def test_compact_serialization(self):
        tx = TransferTx(sender=mk_signer(1), receiver=mk_address(2), **ENVELOPE)
        serialized = serialize_for_signing(build_unsigned_raw_tx(tx))
        assert b" " not in serialized
        assert b'"data"' not in serialized

    def test_negative_value(self):
        tx = TransferTx(sender=mk_signer(1), receiver=mk_address(2), value=-1, **ENVELOPE)
        with pytest.raises(EncodingError, match="negative"):
            build_unsigned_raw_tx(tx)

    @pytest.mark.asyncio
    async def test_signature_covers_unsigned_form(self):
        sender = mk_signer(1)
        tx = TransferTx(sender=sender, receiver=mk_address(2), value=100, **ENVELOPE)
        raw = await broad_tx_to_raw_tx(tx)

        unsigned = build_unsigned_raw_tx(tx)
        assert sender.verify(bytes.fromhex(raw.signature), serialize_for_signing(unsigned))
        assert raw.to_dict()["signature"] == raw.signature

    @pytest.mark.asyncio
    async def test_raw_tx_passthrough(self):
        raw = RawTx(nonce=0, value="0", receiver="r", sender="s", gas_price=1, gas_limit=1,
                    chain_id="D", version=1, signature="00")
        assert await broad_tx_to_raw_tx(raw) is raw

    @pytest.mark.asyncio
    async def test_sender_must_sign(self):
        tx = TransferTx(sender=mk_address(1), receiver=mk_address(2), **ENVELOPE)
        with pytest.raises(SignerError, match="cannot sign"):
            await broad_tx_to_raw_tx(tx)
