"""
Gateway clients, the transaction pipeline and result decoding.
"""

from .gateway import GatewayClient, ProxyConfig
from .proxy import Proxy
from .fsproxy import AccountState, FSProxy
from .results import (
    Account, CallContractResult, DeployContractResult, NetworkStatus, QueryResult, TxResult,
)

__all__ = [
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
]
