"""
Client-side handles: worlds, wallets, contracts and the simulated network.
"""

from .world import NETWORKS, Network, World, Wallet, Contract, expand_code
from .fsworld import FSWorld, FSWallet, FSContract, FSDeployContractResult, SimulnetConfig

__all__ = [
    "NETWORKS",
    "Network",
    "World",
    "Wallet",
    "Contract",
    "expand_code",
    "FSWorld",
    "FSWallet",
    "FSContract",
    "FSDeployContractResult",
    "SimulnetConfig",
]
