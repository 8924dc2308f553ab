"""
Address type and bech32 codec for MultiversX-style addresses.

An address is 32 raw bytes rendered either as hex (inside transaction data
payloads) or as a bech32 string with the "erd" human readable part (in
transaction envelopes and gateway paths).
"""

from __future__ import annotations
from typing import Any, List, Sequence, Union

HRP = "erd"
ADDRESS_LENGTH = 32
NUM_SHARDS = 3

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
CHARSET_REV = {c: i for i, c in enumerate(CHARSET)}

_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


class AddressError(ValueError):
    """Invalid address input."""
    pass


def _polymod(values: Sequence[int]) -> int:
    chk = 1
    for v in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ v
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATORS[i]
    return chk


def _hrp_expand(hrp: str) -> List[int]:
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def _convertbits(data: Sequence[int], from_bits: int, to_bits: int, pad: bool) -> List[int]:
    acc = 0
    bits = 0
    ret: List[int] = []
    maxv = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise AddressError("Invalid bech32 padding")
    return ret


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode raw bytes as a (BIP-0173) bech32 string."""
    words = _convertbits(data, 8, 5, pad=True)
    polymod = _polymod(_hrp_expand(hrp) + words + [0] * 6) ^ 1
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(CHARSET[d] for d in words + checksum)


def bech32_decode(bech: str) -> tuple[str, bytes]:
    """
    Decode a bech32 string into (hrp, raw bytes).

    Raises:
        AddressError: On malformed input or checksum mismatch
    """
    if bech.lower() != bech and bech.upper() != bech:
        raise AddressError(f"Mixed-case bech32 string: {bech}")
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech):
        raise AddressError(f"Invalid bech32 string: {bech}")
    hrp, data_part = bech[:pos], bech[pos + 1:]
    try:
        words = [CHARSET_REV[c] for c in data_part]
    except KeyError:
        raise AddressError(f"Invalid bech32 character in: {bech}")
    if _polymod(_hrp_expand(hrp) + words) != 1:
        raise AddressError(f"Invalid bech32 checksum: {bech}")
    return hrp, bytes(_convertbits(words[:-6], 5, 8, pad=False))


class Address:
    """32-byte account or contract address."""

    def __init__(self, data: bytes):
        if not isinstance(data, (bytes, bytearray)):
            raise AddressError("Address must be built from bytes")
        if len(data) != ADDRESS_LENGTH:
            raise AddressError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(data)}")
        self._data = bytes(data)

    @classmethod
    def from_bech(cls, bech: str) -> Address:
        hrp, data = bech32_decode(bech)
        if hrp != HRP:
            raise AddressError(f"Unexpected address prefix '{hrp}' in {bech}")
        return cls(data)

    @classmethod
    def from_hex(cls, hex_string: str) -> Address:
        try:
            return cls(bytes.fromhex(hex_string))
        except ValueError as e:
            raise AddressError(f"Invalid hex address {hex_string!r}: {e}")

    @property
    def raw(self) -> bytes:
        return self._data

    @property
    def bech(self) -> str:
        return bech32_encode(HRP, self._data)

    @property
    def hex(self) -> str:
        return self._data.hex()

    @property
    def shard(self) -> int:
        return shard_of(self._data)

    def is_contract(self) -> bool:
        """Smart contract addresses start with eight zero bytes."""
        return self._data[:8] == bytes(8)

    def __str__(self) -> str:
        return self.bech

    def __repr__(self) -> str:
        return f"Address('{self.bech}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Address):
            return self._data == other._data
        if isinstance(other, str):
            return other in (self.bech, self.hex)
        return False

    def __hash__(self) -> int:
        return hash(self._data)


AddressLike = Union[str, bytes, Address, Any]


def is_address_like(value: Any) -> bool:
    """True for values address_like_to_address() accepts without raising."""
    try:
        address_like_to_address(value)
    except AddressError:
        return False
    return True


def address_like_to_address(value: AddressLike) -> Address:
    """
    Resolve an address-like value.

    Accepted forms: an Address, a bech32 string, a 64-char hex string,
    32 raw bytes, or any object exposing an ``address`` attribute
    (signers, wallets, contracts).
    """
    if isinstance(value, Address):
        return value
    if isinstance(value, str):
        if value.startswith(HRP + "1"):
            return Address.from_bech(value)
        if len(value) == 2 * ADDRESS_LENGTH:
            return Address.from_hex(value)
        raise AddressError(f"Not an address: {value!r}")
    if isinstance(value, (bytes, bytearray)):
        return Address(bytes(value))
    inner = getattr(value, "address", None)
    if inner is not None and inner is not value:
        return address_like_to_address(inner)
    raise AddressError(f"Not an address-like value: {value!r}")


def address_like_to_bech(value: AddressLike) -> str:
    return address_like_to_address(value).bech


def address_like_to_hex(value: AddressLike) -> str:
    return address_like_to_address(value).hex


def shard_of(data: bytes, num_shards: int = NUM_SHARDS) -> int:
    """Compute the shard an address belongs to from its last byte."""
    mask_high = (1 << (num_shards - 1).bit_length()) - 1
    mask_low = (1 << ((num_shards - 1).bit_length() - 1)) - 1
    shard = data[-1] & mask_high
    if shard > num_shards - 1:
        shard = data[-1] & mask_low
    return shard


ZERO_ADDRESS = Address(bytes(ADDRESS_LENGTH))
zero_bech_address = ZERO_ADDRESS.bech


__all__ = [
    "HRP",
    "Address",
    "AddressError",
    "AddressLike",
    "ZERO_ADDRESS",
    "zero_bech_address",
    "address_like_to_address",
    "address_like_to_bech",
    "address_like_to_hex",
    "bech32_decode",
    "bech32_encode",
    "is_address_like",
    "shard_of",
]
