"""
Value encoding for transaction and query arguments.
"""

from .encoding import (
    Encodable, UintEncodable, IntEncodable, BufferEncodable, StrEncodable,
    AddrEncodable, BoolEncodable, TupleEncodable, ListEncodable, OptionEncodable,
    BytesLike, EncodableCodeMetadata, CODE_METADATA_FLAGS,
    bytes_like_to_hex, encode_code_metadata, encode_kvs, hex_to_bytes, e,
)
from .writer import BinaryWriter

__all__ = [
    "Encodable",
    "UintEncodable",
    "IntEncodable",
    "BufferEncodable",
    "StrEncodable",
    "AddrEncodable",
    "BoolEncodable",
    "TupleEncodable",
    "ListEncodable",
    "OptionEncodable",
    "BytesLike",
    "EncodableCodeMetadata",
    "CODE_METADATA_FLAGS",
    "BinaryWriter",
    "bytes_like_to_hex",
    "encode_code_metadata",
    "encode_kvs",
    "hex_to_bytes",
    "e",
]
