"""
Transaction intents, encoding and signing.
"""

from .types import (
    Esdt, Tx, TransferTx, DeployContractTx, CallContractTx, UpgradeContractTx,
    TxIntent, RawTx, Query, RawQuery,
)
from .encoder import (
    EncodedTx, encode_intent, encode_transfer, encode_deploy_contract,
    encode_call_contract, encode_upgrade_contract, intent_to_tx, query_to_raw_query,
)
from .codec import BroadTx, broad_tx_to_raw_tx, build_unsigned_raw_tx, serialize_for_signing

__all__ = [
    "Esdt",
    "Tx",
    "TransferTx",
    "DeployContractTx",
    "CallContractTx",
    "UpgradeContractTx",
    "TxIntent",
    "RawTx",
    "Query",
    "RawQuery",
    "EncodedTx",
    "encode_intent",
    "encode_transfer",
    "encode_deploy_contract",
    "encode_call_contract",
    "encode_upgrade_contract",
    "intent_to_tx",
    "query_to_raw_query",
    "BroadTx",
    "broad_tx_to_raw_tx",
    "build_unsigned_raw_tx",
    "serialize_for_signing",
]
