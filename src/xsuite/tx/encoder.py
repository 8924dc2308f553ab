"""
Transaction encoder.

Pure functions turning a transaction intent into the (receiver, data, value)
triple that goes on the wire. No network access and no signing happens here.

Token transfers use the self-transfer shape required by the token-transfer
protocol: the transaction is addressed to the sender itself and the real
destination travels inside the data field.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..codec.encoding import e, encode_code_metadata
from ..runtime.address import (
    AddressLike, ZERO_ADDRESS, address_like_to_bech, address_like_to_hex,
)
from ..runtime.errors import EncodingError
from .types import (
    CallContractTx, DeployContractTx, Esdt, EsdtLike, Query, RawQuery, TransferTx,
    Tx, TxIntent, UpgradeContractTx,
)

MULTI_TRANSFER_FUNC = "MultiESDTNFTTransfer"
UPGRADE_FUNC = "upgradeContract"
VM_TYPE = "0500"


@dataclass(frozen=True)
class EncodedTx:
    receiver: AddressLike
    data: Optional[str]
    value: int


def _to_esdt(esdt: EsdtLike) -> Esdt:
    if isinstance(esdt, Esdt):
        return esdt
    try:
        return Esdt(id=esdt["id"], amount=int(esdt["amount"]), nonce=int(esdt.get("nonce") or 0))
    except (KeyError, TypeError, ValueError) as err:
        raise EncodingError(f"Invalid token transfer item {esdt!r}: {err}")


def multi_transfer_parts(receiver: AddressLike, esdts: Sequence[EsdtLike]) -> List[str]:
    """Data segments of a multi-token transfer towards ``receiver``."""
    parts = [MULTI_TRANSFER_FUNC, address_like_to_hex(receiver), e.U(len(esdts)).to_top_hex()]
    for item in esdts:
        esdt = _to_esdt(item)
        parts.append(e.Str(esdt.id).to_top_hex())
        parts.append(e.U(esdt.nonce).to_top_hex())
        parts.append(e.U(esdt.amount).to_top_hex())
    return parts


def encode_transfer(tx: TransferTx) -> EncodedTx:
    if tx.esdts:
        if tx.data is not None:
            raise EncodingError("A token transfer cannot carry a data field")
        data = "@".join(multi_transfer_parts(tx.receiver, tx.esdts))
        return EncodedTx(receiver=tx.sender, data=data, value=tx.value)
    return EncodedTx(receiver=tx.receiver, data=tx.data, value=tx.value)


def encode_deploy_contract(tx: DeployContractTx) -> EncodedTx:
    parts = [tx.code, VM_TYPE, encode_code_metadata(tx.code_metadata), *e.vs(tx.code_args)]
    return EncodedTx(receiver=ZERO_ADDRESS, data="@".join(parts), value=tx.value)


def encode_call_contract(tx: CallContractTx) -> EncodedTx:
    if tx.esdts:
        receiver = tx.sender
        parts = multi_transfer_parts(tx.callee, tx.esdts)
        parts.append(e.Str(tx.func_name).to_top_hex())
    else:
        receiver = tx.callee
        parts = [tx.func_name]
    parts.extend(e.vs(tx.func_args))
    return EncodedTx(receiver=receiver, data="@".join(parts), value=tx.value)


def encode_upgrade_contract(tx: UpgradeContractTx) -> EncodedTx:
    parts = [UPGRADE_FUNC, tx.code, encode_code_metadata(tx.code_metadata), *e.vs(tx.code_args)]
    return EncodedTx(receiver=tx.callee, data="@".join(parts), value=tx.value)


def encode_intent(intent: TxIntent) -> EncodedTx:
    """Derive receiver, data and value for any transaction kind."""
    if isinstance(intent, TransferTx):
        return encode_transfer(intent)
    if isinstance(intent, DeployContractTx):
        return encode_deploy_contract(intent)
    if isinstance(intent, CallContractTx):
        return encode_call_contract(intent)
    if isinstance(intent, UpgradeContractTx):
        return encode_upgrade_contract(intent)
    if isinstance(intent, Tx):
        return EncodedTx(receiver=intent.receiver, data=intent.data, value=intent.value)
    raise TypeError(f"Unknown transaction kind: {type(intent).__name__}")


def intent_to_tx(intent: TxIntent) -> Tx:
    """Flatten an intent into a generic transaction."""
    if isinstance(intent, Tx):
        return intent
    encoded = encode_intent(intent)
    return Tx(
        receiver=encoded.receiver,
        sender=intent.sender,
        nonce=intent.nonce,
        gas_price=intent.gas_price,
        gas_limit=intent.gas_limit,
        chain_id=intent.chain_id,
        value=encoded.value,
        data=encoded.data,
        version=intent.version,
    )


def query_to_raw_query(query: Query | RawQuery) -> RawQuery:
    if isinstance(query, RawQuery):
        return query
    return RawQuery(
        sc_address=address_like_to_bech(query.callee),
        func_name=query.func_name,
        args=tuple(e.vs(query.func_args)),
        caller=address_like_to_bech(query.sender) if query.sender is not None else None,
        value=str(query.value) if query.value is not None else None,
    )
