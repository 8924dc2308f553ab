"""
Settled transaction decoding.

Classifies a settled transaction snapshot as successful or failed and
extracts its outcome data. The checks form an ordered decision list, first
match wins:

1. status other than "success"        -> TxStatusError
2. non-empty execution receipt code   -> TxReceiptError
3. a "signalError" event              -> SignalError
4. otherwise success; return data comes from the "writeLog" event, or from
   the smart contract result carrying the "@6f6b" (ok) marker, or is empty.

All functions here are pure.
"""

from __future__ import annotations
import base64
import binascii
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..runtime.errors import (
    DecodeError, PendingRaceError, QueryError, SignalError, TxReceiptError, TxStatusError,
)

SUCCESS_STATUS = "success"
PENDING_STATUS = "pending"
OK_MARKER = "@6f6b"
QUERY_OK_CODES = (0, "ok")


class TxResult(BaseModel):
    """Outcome of a successful transaction."""

    model_config = ConfigDict(frozen=True)

    hash: str
    explorer_url: str
    gas_used: int
    fee: int
    tx: Dict[str, Any]


class CallContractResult(TxResult):
    return_data: List[str]


class DeployContractResult(CallContractResult):
    address: str


class QueryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    return_data: List[str]
    query: Dict[str, Any]


class NetworkStatus(BaseModel):
    """Round, nonce and epoch metadata of a shard."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    block_timestamp: int = Field(alias="erd_block_timestamp")
    cross_check_block_height: str = Field(alias="erd_cross_check_block_height")
    round: int = Field(alias="erd_current_round")
    epoch: int = Field(alias="erd_epoch_number")
    highest_final_nonce: int = Field(alias="erd_highest_final_nonce")
    nonce: int = Field(alias="erd_nonce")
    nonce_at_epoch_start: int = Field(alias="erd_nonce_at_epoch_start")
    nonces_passed_in_current_epoch: int = Field(alias="erd_nonces_passed_in_current_epoch")
    round_at_epoch_start: int = Field(alias="erd_round_at_epoch_start")
    rounds_passed_in_current_epoch: int = Field(alias="erd_rounds_passed_in_current_epoch")
    rounds_per_epoch: int = Field(alias="erd_rounds_per_epoch")


class Account(BaseModel):
    """Account state as read from the gateway; hex encoded byte fields."""

    model_config = ConfigDict(frozen=True)

    address: str
    nonce: int
    balance: int
    code: str = ""
    code_hash: str = ""
    code_metadata: str = ""
    owner: Optional[str] = None
    kvs: Dict[str, str] = Field(default_factory=dict)


def base64_to_bytes(value: str) -> bytes:
    if not isinstance(value, str):
        raise DecodeError(f"Expected base64 string, got {value!r}")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 data {value!r}: {e}")


def base64_to_hex(value: str) -> str:
    return base64_to_bytes(value).hex()


def _events(tx: Dict[str, Any]) -> List[Dict[str, Any]]:
    logs = tx.get("logs") or {}
    return logs.get("events") or []


def find_event(tx: Dict[str, Any], identifier: str) -> Optional[Dict[str, Any]]:
    return next((ev for ev in _events(tx) if ev.get("identifier") == identifier), None)


def check_tx_outcome(tx: Dict[str, Any], tx_hash: Optional[str] = None) -> None:
    """
    Apply the failure rules to a settled transaction.

    Raises:
        PendingRaceError: If the snapshot still reads pending
        TxStatusError: If the status is not 'success'
        TxReceiptError: If the execution receipt carries a return code
        SignalError: If the contract signalled an error
    """
    tx_hash = tx_hash or tx.get("hash")
    status = tx.get("status")
    if status == PENDING_STATUS:
        raise PendingRaceError(tx_hash, tx)
    if status != SUCCESS_STATUS:
        raise TxStatusError(status, tx, tx_hash)
    receipt = tx.get("executionReceipt") or {}
    if receipt.get("returnCode"):
        raise TxReceiptError(receipt["returnCode"], receipt.get("returnMessage", ""), tx, tx_hash)
    signal_error = find_event(tx, "signalError")
    if signal_error is not None:
        topics = signal_error.get("topics") or []
        if len(topics) < 2:
            raise DecodeError(f"signalError event without message topic in transaction {tx_hash}")
        message = base64_to_bytes(topics[1]).decode("utf-8", errors="replace")
        raise SignalError(message, tx, tx_hash)


def get_tx_return_data(tx: Dict[str, Any]) -> List[str]:
    """Hex return values of a successful contract call; possibly empty."""
    write_log = find_event(tx, "writeLog")
    if write_log is not None:
        data = base64_to_bytes(write_log.get("data")).decode("utf-8", errors="replace")
        return data.split("@")[2:]
    for scr in tx.get("smartContractResults") or []:
        data = scr.get("data")
        if isinstance(data, str) and (data == OK_MARKER or data.startswith(OK_MARKER + "@")):
            return data.split("@")[2:]
    return []


def get_deployed_address(tx: Dict[str, Any]) -> str:
    """Address of the contract created by a deploy transaction."""
    event = find_event(tx, "SCDeploy")
    if event is None:
        raise RuntimeError(f"Successful deploy transaction {tx.get('hash')} has no SCDeploy event")
    return event["address"]


def decode_tx_result(tx: Dict[str, Any], explorer_url: str = "",
                     tx_hash: Optional[str] = None) -> TxResult:
    """Classify a settled transaction and build the plain transfer result."""
    tx_hash = tx.get("hash") or tx_hash
    link = f"{explorer_url}/transactions/{tx_hash}"
    tx = {"explorerUrl": link, "hash": tx_hash, **tx}
    check_tx_outcome(tx, tx_hash)
    return TxResult(
        hash=tx_hash,
        explorer_url=link,
        gas_used=int(tx.get("gasUsed", 0)),
        fee=int(tx.get("fee", 0)),
        tx=tx,
    )


def decode_call_contract_result(tx: Dict[str, Any], explorer_url: str = "",
                                tx_hash: Optional[str] = None) -> CallContractResult:
    res = decode_tx_result(tx, explorer_url, tx_hash)
    return CallContractResult(**res.model_dump(), return_data=get_tx_return_data(res.tx))


def decode_deploy_contract_result(tx: Dict[str, Any], explorer_url: str = "",
                                  tx_hash: Optional[str] = None) -> DeployContractResult:
    res = decode_call_contract_result(tx, explorer_url, tx_hash)
    return DeployContractResult(**res.model_dump(), address=get_deployed_address(res.tx))


def decode_query_result(data: Dict[str, Any]) -> QueryResult:
    """
    Decode a /vm-values/query answer.

    Raises:
        QueryError: If the return code is neither 0 nor 'ok'
    """
    if data.get("returnCode") not in QUERY_OK_CODES:
        raise QueryError(data.get("returnCode"), data.get("returnMessage", ""), data)
    return_data = [base64_to_hex(v) if v else "" for v in data.get("returnData") or []]
    return QueryResult(return_data=return_data, query=data)


def decode_account(raw: Dict[str, Any], kvs: Optional[Dict[str, str]] = None) -> Account:
    return Account(
        address=raw["address"],
        nonce=int(raw.get("nonce", 0)),
        balance=int(raw.get("balance", "0")),
        code=raw.get("code") or "",
        code_hash=base64_to_hex(raw.get("codeHash") or ""),
        code_metadata=base64_to_hex(raw.get("codeMetadata") or ""),
        owner=raw.get("ownerAddress") or None,
        kvs=kvs if kvs is not None else raw.get("pairs") or {},
    )
