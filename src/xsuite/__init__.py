"""
xSuite Python SDK

Client SDK for MultiversX networks: builds and signs transactions, submits
them to a gateway, waits for settlement and decodes the outcome. Includes a
controller for a locally spawned chain simulator.
"""

# Errors and addresses
from .runtime.errors import *
from .runtime.address import Address, AddressError, ZERO_ADDRESS, zero_bech_address

# Encoding
from .codec import e, encode_code_metadata

# Signing
from .signers import Signer, SignerError, DummySigner, Ed25519Signer

# Transactions
from .tx import (
    Esdt, Tx, TransferTx, DeployContractTx, CallContractTx, UpgradeContractTx,
    RawTx, Query, RawQuery,
)

# Gateway and pipeline
from .proxy import (
    GatewayClient, ProxyConfig, Proxy, FSProxy, AccountState,
    Account, TxResult, CallContractResult, DeployContractResult, QueryResult, NetworkStatus,
)

# Worlds
from .world import World, Wallet, Contract, FSWorld, FSWallet, FSContract, SimulnetConfig

__version__ = "0.1.0"
__all__ = [
    # Errors
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

    # Addresses and encoding
    "Address",
    "AddressError",
    "ZERO_ADDRESS",
    "zero_bech_address",
    "e",
    "encode_code_metadata",

    # Signing
    "Signer",
    "SignerError",
    "DummySigner",
    "Ed25519Signer",

    # Transactions
    "Esdt",
    "Tx",
    "TransferTx",
    "DeployContractTx",
    "CallContractTx",
    "UpgradeContractTx",
    "RawTx",
    "Query",
    "RawQuery",

    # Gateway and pipeline
    "GatewayClient",
    "ProxyConfig",
    "Proxy",
    "FSProxy",
    "AccountState",
    "Account",
    "TxResult",
    "CallContractResult",
    "DeployContractResult",
    "QueryResult",
    "NetworkStatus",

    # Worlds
    "World",
    "Wallet",
    "Contract",
    "FSWorld",
    "FSWallet",
    "FSContract",
    "SimulnetConfig",
]
