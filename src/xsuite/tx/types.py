"""
Transaction intents.

Each transaction kind is a plain immutable record. The kinds share the
nonce/gas/chain envelope but differ in how receiver and data are derived,
which is handled once by ``xsuite.tx.encoder.encode_intent``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from ..codec.encoding import BytesLike, EncodableCodeMetadata
from ..runtime.address import AddressLike
from ..signers.signer import Signer


@dataclass(frozen=True)
class Esdt:
    """Token transfer item; nonce 0 denotes a fungible token."""
    id: str
    amount: int
    nonce: int = 0


EsdtLike = Union[Esdt, dict]


@dataclass(frozen=True, kw_only=True)
class Tx:
    """Generic transaction with an already assembled data field."""
    receiver: AddressLike
    sender: Signer
    nonce: int
    gas_price: int
    gas_limit: int
    chain_id: str
    value: int = 0
    data: Optional[str] = None
    version: int = 1


@dataclass(frozen=True, kw_only=True)
class TransferTx:
    receiver: AddressLike
    sender: Signer
    nonce: int
    gas_price: int
    gas_limit: int
    chain_id: str
    value: int = 0
    esdts: Sequence[EsdtLike] = field(default_factory=tuple)
    data: Optional[str] = None
    version: int = 1


@dataclass(frozen=True, kw_only=True)
class DeployContractTx:
    sender: Signer
    code: str
    code_metadata: EncodableCodeMetadata
    nonce: int
    gas_price: int
    gas_limit: int
    chain_id: str
    value: int = 0
    code_args: Sequence[BytesLike] = field(default_factory=tuple)
    version: int = 1


@dataclass(frozen=True, kw_only=True)
class CallContractTx:
    callee: AddressLike
    sender: Signer
    func_name: str
    nonce: int
    gas_price: int
    gas_limit: int
    chain_id: str
    value: int = 0
    func_args: Sequence[BytesLike] = field(default_factory=tuple)
    esdts: Sequence[EsdtLike] = field(default_factory=tuple)
    version: int = 1


@dataclass(frozen=True, kw_only=True)
class UpgradeContractTx:
    callee: AddressLike
    sender: Signer
    code: str
    code_metadata: EncodableCodeMetadata
    nonce: int
    gas_price: int
    gas_limit: int
    chain_id: str
    value: int = 0
    code_args: Sequence[BytesLike] = field(default_factory=tuple)
    version: int = 1


TxIntent = Union[Tx, TransferTx, DeployContractTx, CallContractTx, UpgradeContractTx]


@dataclass(frozen=True)
class RawTx:
    """
    Signed wire form of a transaction.

    ``data`` is base64 encoded; numeric amounts are decimal strings.
    """
    nonce: int
    value: str
    receiver: str
    sender: str
    gas_price: int
    gas_limit: int
    chain_id: str
    version: int
    signature: str
    data: Optional[str] = None

    def to_dict(self) -> dict:
        return {**unsigned_fields(self), "signature": self.signature}


def unsigned_fields(tx: RawTx) -> dict:
    """Wire fields covered by the signature, in their canonical order."""
    fields = {
        "nonce": tx.nonce,
        "value": tx.value,
        "receiver": tx.receiver,
        "sender": tx.sender,
        "gasPrice": tx.gas_price,
        "gasLimit": tx.gas_limit,
    }
    if tx.data is not None:
        fields["data"] = tx.data
    fields["chainID"] = tx.chain_id
    fields["version"] = tx.version
    return fields


@dataclass(frozen=True, kw_only=True)
class Query:
    """Read-only contract call."""
    callee: AddressLike
    func_name: str
    func_args: Sequence[BytesLike] = field(default_factory=tuple)
    sender: Optional[AddressLike] = None
    value: Optional[int] = None


@dataclass(frozen=True)
class RawQuery:
    sc_address: str
    func_name: str
    args: Tuple[str, ...] = ()
    caller: Optional[str] = None
    value: Optional[str] = None

    def to_dict(self) -> dict:
        query = {"scAddress": self.sc_address, "funcName": self.func_name, "args": list(self.args)}
        if self.caller is not None:
            query["caller"] = self.caller
        if self.value is not None:
            query["value"] = self.value
        return query
