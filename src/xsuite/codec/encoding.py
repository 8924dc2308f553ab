"""
Top and nested encoding of contract values.

Top-encoding is the form a value takes when it is a whole argument of a
transaction or query (minimal length, no prefix). Nested encoding is the
form it takes inside a composite value (fixed width or length prefixed).
Arguments are carried as hex strings joined by '@' in transaction data.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..runtime.address import AddressLike, address_like_to_address
from ..runtime.errors import EncodingError
from .writer import BinaryWriter, top_int_bytes, top_uint_bytes


class Encodable(ABC):
    """Value that knows its top and nested binary representations."""

    @abstractmethod
    def to_top_bytes(self) -> bytes:
        pass

    @abstractmethod
    def write_nested(self, writer: BinaryWriter) -> None:
        pass

    def to_nest_bytes(self) -> bytes:
        writer = BinaryWriter()
        self.write_nested(writer)
        return writer.to_bytes()

    def to_top_hex(self) -> str:
        return self.to_top_bytes().hex()

    def to_nest_hex(self) -> str:
        return self.to_nest_bytes().hex()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Encodable):
            return NotImplemented
        return type(self) is type(other) and self.to_nest_bytes() == other.to_nest_bytes()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.to_nest_bytes()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_top_hex()!r})"


class UintEncodable(Encodable):
    """Unsigned integer; arbitrary precision when size is None."""

    def __init__(self, value: int, size: Optional[int] = None):
        if value < 0:
            raise EncodingError(f"Unsigned integer cannot be negative: {value}")
        if size is not None and value >= 1 << (8 * size):
            raise EncodingError(f"{value} does not fit in {size} bytes")
        self.value = int(value)
        self.size = size

    def to_top_bytes(self) -> bytes:
        return top_uint_bytes(self.value)

    def write_nested(self, writer: BinaryWriter) -> None:
        if self.size is None:
            writer.len_prefixed_bytes(top_uint_bytes(self.value))
        else:
            writer.uint(self.value, self.size)


class IntEncodable(Encodable):
    """Signed two's complement integer; arbitrary precision when size is None."""

    def __init__(self, value: int, size: Optional[int] = None):
        if size is not None and not -(1 << (8 * size - 1)) <= value < 1 << (8 * size - 1):
            raise EncodingError(f"{value} does not fit in {size} signed bytes")
        self.value = int(value)
        self.size = size

    def to_top_bytes(self) -> bytes:
        return top_int_bytes(self.value)

    def write_nested(self, writer: BinaryWriter) -> None:
        if self.size is None:
            writer.len_prefixed_bytes(top_int_bytes(self.value))
        else:
            writer.bytes(self.value.to_bytes(self.size, "big", signed=True))


class BufferEncodable(Encodable):
    """Arbitrary byte buffer, given as bytes or as a hex string."""

    def __init__(self, data: Union[bytes, str]):
        if isinstance(data, str):
            data = hex_to_bytes(data)
        self.data = bytes(data)

    def to_top_bytes(self) -> bytes:
        return self.data

    def write_nested(self, writer: BinaryWriter) -> None:
        writer.len_prefixed_bytes(self.data)


class StrEncodable(BufferEncodable):
    """UTF-8 string."""

    def __init__(self, value: str):
        super().__init__(value.encode("utf-8"))
        self.value = value


class AddrEncodable(Encodable):
    """32-byte address; identical in top and nested form."""

    def __init__(self, address: AddressLike):
        self.address = address_like_to_address(address)

    def to_top_bytes(self) -> bytes:
        return self.address.raw

    def write_nested(self, writer: BinaryWriter) -> None:
        writer.bytes(self.address.raw)


class BoolEncodable(Encodable):

    def __init__(self, value: bool):
        self.value = bool(value)

    def to_top_bytes(self) -> bytes:
        return b"\x01" if self.value else b""

    def write_nested(self, writer: BinaryWriter) -> None:
        writer.u8(1 if self.value else 0)


class TupleEncodable(Encodable):
    """Concatenation of nested items."""

    def __init__(self, items: Sequence[Encodable]):
        self.items = list(items)

    def to_top_bytes(self) -> bytes:
        return self.to_nest_bytes()

    def write_nested(self, writer: BinaryWriter) -> None:
        for item in self.items:
            item.write_nested(writer)


class ListEncodable(TupleEncodable):
    """Homogeneous list; the nested form carries a 4-byte item count."""

    def to_top_bytes(self) -> bytes:
        writer = BinaryWriter()
        for item in self.items:
            item.write_nested(writer)
        return writer.to_bytes()

    def write_nested(self, writer: BinaryWriter) -> None:
        writer.u32be(len(self.items))
        for item in self.items:
            item.write_nested(writer)


class OptionEncodable(Encodable):
    """Optional value: absent is empty at top level and 0x00 when nested."""

    def __init__(self, item: Optional[Encodable]):
        self.item = item

    def to_top_bytes(self) -> bytes:
        if self.item is None:
            return b""
        return b"\x01" + self.item.to_nest_bytes()

    def write_nested(self, writer: BinaryWriter) -> None:
        if self.item is None:
            writer.u8(0)
        else:
            writer.u8(1)
            self.item.write_nested(writer)


BytesLike = Union[Encodable, bytes, str]


def hex_to_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise EncodingError(f"Invalid hex string {value!r}: {e}")


def bytes_like_to_hex(value: BytesLike) -> str:
    """Top-encode an argument: Encodable values, raw bytes or hex strings."""
    if isinstance(value, Encodable):
        return value.to_top_hex()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, str):
        return hex_to_bytes(value).hex()
    raise EncodingError(f"Cannot encode argument of type {type(value).__name__}: {value!r}")


# Code metadata flags: (byte index, bit mask)
CODE_METADATA_FLAGS = {
    "upgradeable": (0, 0x01),
    "readable": (0, 0x04),
    "payable": (1, 0x02),
    "payableBySc": (1, 0x04),
}

EncodableCodeMetadata = Union[str, Sequence[str]]


def encode_code_metadata(metadata: EncodableCodeMetadata) -> str:
    """
    Encode code metadata to its 2-byte hex form.

    Args:
        metadata: Hex string (passed through), or a list of flag names among
            'upgradeable', 'readable', 'payable', 'payableBySc'

    Returns:
        Hex string

    Raises:
        EncodingError: On an unknown flag or malformed hex
    """
    if isinstance(metadata, str):
        if metadata in CODE_METADATA_FLAGS:
            metadata = [metadata]
        else:
            return hex_to_bytes(metadata).hex()
    data = bytearray(2)
    for flag in metadata:
        if flag not in CODE_METADATA_FLAGS:
            raise EncodingError(f"Unknown code metadata flag: {flag}")
        index, mask = CODE_METADATA_FLAGS[flag]
        data[index] |= mask
    return data.hex()


def encode_kvs(kvs: Optional[Mapping[BytesLike, BytesLike]]) -> Dict[str, str]:
    """Encode storage key-value pairs to a hex -> hex mapping."""
    if not kvs:
        return {}
    return {bytes_like_to_hex(k): bytes_like_to_hex(v) for k, v in kvs.items()}


class e:
    """Shorthand constructors for encodable values."""

    @staticmethod
    def U(value: int) -> UintEncodable:
        return UintEncodable(value)

    @staticmethod
    def U8(value: int) -> UintEncodable:
        return UintEncodable(value, 1)

    @staticmethod
    def U16(value: int) -> UintEncodable:
        return UintEncodable(value, 2)

    @staticmethod
    def U32(value: int) -> UintEncodable:
        return UintEncodable(value, 4)

    @staticmethod
    def U64(value: int) -> UintEncodable:
        return UintEncodable(value, 8)

    @staticmethod
    def I(value: int) -> IntEncodable:
        return IntEncodable(value)

    @staticmethod
    def I8(value: int) -> IntEncodable:
        return IntEncodable(value, 1)

    @staticmethod
    def I16(value: int) -> IntEncodable:
        return IntEncodable(value, 2)

    @staticmethod
    def I32(value: int) -> IntEncodable:
        return IntEncodable(value, 4)

    @staticmethod
    def I64(value: int) -> IntEncodable:
        return IntEncodable(value, 8)

    @staticmethod
    def Str(value: str) -> StrEncodable:
        return StrEncodable(value)

    @staticmethod
    def Buffer(value: Union[bytes, str]) -> BufferEncodable:
        return BufferEncodable(value)

    @staticmethod
    def Addr(address: AddressLike) -> AddrEncodable:
        return AddrEncodable(address)

    @staticmethod
    def Bool(value: bool) -> BoolEncodable:
        return BoolEncodable(value)

    @staticmethod
    def Tuple(*items: Encodable) -> TupleEncodable:
        return TupleEncodable(items)

    @staticmethod
    def List(*items: Encodable) -> ListEncodable:
        return ListEncodable(items)

    @staticmethod
    def Option(item: Optional[Encodable] = None) -> OptionEncodable:
        return OptionEncodable(item)

    @staticmethod
    def vs(values: Iterable[BytesLike]) -> List[str]:
        """Top-encode a list of arguments to hex strings."""
        return [bytes_like_to_hex(v) for v in values]
