"""
Simulated network gateway.

The chain simulator exposes the regular gateway API plus privileged
``/simulator`` endpoints for injecting account state and driving block
production.
"""

from __future__ import annotations
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..codec.encoding import BytesLike, EncodableCodeMetadata, encode_code_metadata, encode_kvs
from ..runtime.address import AddressLike, address_like_to_bech
from .proxy import Proxy

logger = logging.getLogger(__name__)


@dataclass
class AccountState:
    """Account record to inject into the simulated network."""

    address: AddressLike
    nonce: Optional[int] = None
    balance: int = 0
    code: Optional[str] = None
    code_metadata: Optional[EncodableCodeMetadata] = None
    owner: Optional[AddressLike] = None
    kvs: Optional[Mapping[BytesLike, BytesLike]] = None

    def to_raw(self) -> Dict[str, Any]:
        raw: Dict[str, Any] = {
            "address": address_like_to_bech(self.address),
            "balance": str(self.balance),
        }
        if self.nonce is not None:
            raw["nonce"] = self.nonce
        if self.code is not None:
            raw["code"] = self.code
        if self.code_metadata is not None:
            metadata = bytes.fromhex(encode_code_metadata(self.code_metadata))
            raw["codeMetadata"] = base64.b64encode(metadata).decode("ascii")
        if self.owner is not None:
            raw["ownerAddress"] = address_like_to_bech(self.owner)
        if self.kvs:
            raw["keys"] = encode_kvs(self.kvs)
        return raw


AccountStateLike = Union[AccountState, Mapping[str, Any]]


def to_account_state(account: AccountStateLike) -> AccountState:
    if isinstance(account, AccountState):
        return account
    return AccountState(**account)


class FSProxy(Proxy):
    """Gateway client for a chain simulator."""

    async def get_initial_addresses(self) -> List[str]:
        """Addresses of the pre-funded wallets the simulator starts with."""
        res = await self.fetch("/simulator/initial-wallets")
        wallets = res.get("balanceWallets") or {}
        return [wallets[k]["address"] for k in sorted(wallets, key=int)]

    async def set_accounts(self, accounts: Iterable[AccountStateLike]) -> None:
        """Create or overwrite accounts, bypassing transaction execution."""
        raw_accounts = [to_account_state(a).to_raw() for a in accounts]
        await self.fetch("/simulator/set-state", raw_accounts)
        logger.debug(f"Set state of {len(raw_accounts)} accounts")

    async def set_account(self, account: AccountStateLike) -> None:
        await self.set_accounts([account])

    async def generate_blocks(self, num_blocks: int) -> None:
        await self.fetch(f"/simulator/generate-blocks/{num_blocks}", {})

    async def advance_to_epoch(self, epoch: int) -> None:
        await self.fetch(f"/simulator/generate-blocks-until-epoch-reached/{epoch}", {})

    async def process_tx(self, tx_hash: str) -> None:
        """Generate blocks until the transaction is processed."""
        await self.fetch(f"/simulator/generate-blocks-until-transaction-processed/{tx_hash}", {})

    async def await_tx(self, tx_hash: str, **options) -> str:
        await self.process_tx(tx_hash)
        return await super().await_tx(tx_hash, **options)
