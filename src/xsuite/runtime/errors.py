"""
xSuite Error Model

This module provides the error handling framework for the xSuite Python SDK.
Every failure of a gateway interaction (HTTP envelope, transaction settlement,
contract query) is an InteractionError exposing the same
(interaction, kind, code, message, result) shape so callers can match on it
uniformly regardless of origin.
"""

from __future__ import annotations
import json
from typing import Any, Optional, Union


class XsuiteError(Exception):
    """Base class for all xSuite errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InteractionError(XsuiteError):
    """
    Failure of an interaction with the network.

    Attributes:
        interaction: What was being done ("Transaction", "Query", "Request")
        kind: Stable error kind identifier
        code: Code reported by the network
        msg: Human readable message reported by the network
        result: Raw response the error was derived from
    """

    kind = "interaction"

    def __init__(self, interaction: str, code: Union[int, str], message: str,
                 result: Any, context: Optional[str] = None):
        self.interaction = interaction
        self.code = code
        self.msg = message
        self.result = result
        subject = f"{interaction} {context}" if context else interaction
        super().__init__(
            f"{subject} failed: {code} - {message} - Result:\n"
            + json.dumps(result, indent=2, default=str)
        )

    def to_dict(self) -> dict:
        """Convert error to dictionary representation."""
        return {
            "interaction": self.interaction,
            "kind": self.kind,
            "code": self.code,
            "message": self.msg,
            "result": self.result,
        }


class GatewayError(InteractionError):
    """The gateway answered with an envelope whose code is not 'successful'."""

    kind = "gateway"

    def __init__(self, path: str, response: Any):
        code = response.get("code") if isinstance(response, dict) else None
        error = response.get("error") if isinstance(response, dict) else None
        super().__init__("Request", code or "unknown", error or "Unsuccessful proxy request",
                         response, context=path)
        self.path = path


class NetworkError(XsuiteError):
    """The gateway could not be reached or returned an unreadable body."""
    pass


class TxError(InteractionError):
    """Base class for settled-transaction failures."""

    def __init__(self, code: Union[int, str], message: str, result: Any,
                 tx_hash: Optional[str] = None):
        super().__init__("Transaction", code, message, result, context=tx_hash)
        self.tx_hash = tx_hash


class TxStatusError(TxError):
    """Settled transaction whose status is not 'success'."""

    kind = "errorStatus"

    def __init__(self, status: str, result: Any, tx_hash: Optional[str] = None):
        super().__init__(status, status, result, tx_hash)


class TxReceiptError(TxError):
    """Successful status but a non-empty execution receipt return code."""

    kind = "executionReceipt"


class SignalError(TxError):
    """Contract execution raised an explicit error through a signalError event."""

    kind = "signalError"

    def __init__(self, message: str, result: Any, tx_hash: Optional[str] = None):
        super().__init__("signalError", message, result, tx_hash)


class PendingRaceError(TxError):
    """Transaction was observed as still pending while being resolved."""

    kind = "pendingRace"

    def __init__(self, tx_hash: str, result: Any = None):
        super().__init__("pending", PENDING_ERROR_MESSAGE, result, tx_hash)


class TxTimeoutError(TxError):
    """Transaction did not settle before the await deadline."""

    kind = "timeout"

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__("timeout", f"Transaction not settled after {timeout}s.",
                         {"hash": tx_hash}, tx_hash)
        self.timeout = timeout


class TxCancelledError(TxError):
    """Awaiting the transaction was cancelled by the caller."""

    kind = "cancelled"

    def __init__(self, tx_hash: str):
        super().__init__("cancelled", "Awaiting transaction was cancelled.",
                         {"hash": tx_hash}, tx_hash)


class QueryError(InteractionError):
    """Read-only contract call returned a non-ok return code."""

    kind = "query"

    def __init__(self, code: Union[int, str], message: str, result: Any):
        super().__init__("Query", code, message, result)


class EncodingError(XsuiteError, ValueError):
    """A value cannot be encoded into the wire representation."""
    pass


class DecodeError(XsuiteError, ValueError):
    """Malformed data returned by the network."""
    pass


class SimulnetError(XsuiteError):
    """Misuse of the simulated network controller."""
    pass


class SimulnetStartError(SimulnetError):
    """The simulated network process failed before becoming ready."""
    pass


PENDING_ERROR_MESSAGE = "Transaction still pending."


__all__ = [
    "XsuiteError",
    "InteractionError",
    "GatewayError",
    "NetworkError",
    "TxError",
    "TxStatusError",
    "TxReceiptError",
    "SignalError",
    "PendingRaceError",
    "TxTimeoutError",
    "TxCancelledError",
    "QueryError",
    "EncodingError",
    "DecodeError",
    "SimulnetError",
    "SimulnetStartError",
    "PENDING_ERROR_MESSAGE",
]
