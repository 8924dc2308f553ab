"""
Client-side handles over a network.

A ``World`` binds a ``Proxy`` to a chain id and gas price and fills in the
transaction envelope, so callers only supply what differs between
transactions. ``Wallet`` and ``Contract`` are thin handles delegating to
their world.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..codec.encoding import BytesLike, EncodableCodeMetadata
from ..proxy.proxy import Proxy
from ..proxy.gateway import ProxyConfig
from ..proxy.results import Account, CallContractResult, DeployContractResult, QueryResult, TxResult
from ..runtime.address import Address, AddressLike, address_like_to_address
from ..signers.signer import Signer
from ..tx.types import (
    CallContractTx, DeployContractTx, EsdtLike, Query, TransferTx, Tx, UpgradeContractTx,
)

logger = logging.getLogger(__name__)

DEFAULT_GAS_PRICE = 1_000_000_000
FILE_CODE_PREFIX = "file:"


@dataclass(frozen=True)
class Network:
    """Public endpoints of a well-known network."""
    proxy_url: str
    explorer_url: str
    chain_id: str


NETWORKS: Dict[str, Network] = {
    "devnet": Network(
        proxy_url="https://devnet-gateway.multiversx.com",
        explorer_url="https://devnet-explorer.multiversx.com",
        chain_id="D",
    ),
    "testnet": Network(
        proxy_url="https://testnet-gateway.multiversx.com",
        explorer_url="https://testnet-explorer.multiversx.com",
        chain_id="T",
    ),
    "mainnet": Network(
        proxy_url="https://gateway.multiversx.com",
        explorer_url="https://explorer.multiversx.com",
        chain_id="1",
    ),
}


def expand_code(code: str) -> str:
    """
    Resolve a contract code reference to hex bytecode.

    ``file:<path>`` reads the compiled contract from disk; anything else is
    taken to be hex already.
    """
    if code.startswith(FILE_CODE_PREFIX):
        path = Path(code[len(FILE_CODE_PREFIX):])
        logger.debug(f"Loading contract code from {path}")
        return path.read_bytes().hex()
    return code


class World:
    """
    Transaction and read entry point for one network.

    Args:
        proxy: Gateway client
        chain_id: Chain id stamped on every transaction
        gas_price: Default gas price
    """

    def __init__(self, proxy: Proxy, chain_id: str, gas_price: int = DEFAULT_GAS_PRICE):
        self.proxy = proxy
        self.chain_id = chain_id
        self.gas_price = gas_price

    @classmethod
    def new(cls, proxy_url: str, chain_id: str, gas_price: int = DEFAULT_GAS_PRICE,
            explorer_url: str = "", **config) -> World:
        proxy = Proxy(ProxyConfig(proxy_url=proxy_url, explorer_url=explorer_url, **config))
        return cls(proxy=proxy, chain_id=chain_id, gas_price=gas_price)

    @classmethod
    def new_network(cls, name: str, **options) -> World:
        try:
            network = NETWORKS[name]
        except KeyError:
            raise ValueError(f"Unknown network '{name}', expected one of {sorted(NETWORKS)}")
        options.setdefault("explorer_url", network.explorer_url)
        return cls.new(proxy_url=network.proxy_url, chain_id=network.chain_id, **options)

    @classmethod
    def new_devnet(cls, **options) -> World:
        return cls.new_network("devnet", **options)

    @classmethod
    def new_testnet(cls, **options) -> World:
        return cls.new_network("testnet", **options)

    @classmethod
    def new_mainnet(cls, **options) -> World:
        return cls.new_network("mainnet", **options)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self.proxy.close()

    def new_wallet(self, signer: Signer) -> Wallet:
        return Wallet(signer=signer, world=self)

    def new_contract(self, address: AddressLike) -> Contract:
        return Contract(address=address, world=self)

    async def _envelope(self, sender: Any, nonce: Optional[int],
                        gas_price: Optional[int]) -> Dict[str, Any]:
        if nonce is None:
            nonce = await self.proxy.get_account_nonce(sender)
        return {
            "sender": sender,
            "nonce": nonce,
            "gas_price": self.gas_price if gas_price is None else gas_price,
            "chain_id": self.chain_id,
        }

    async def execute_tx(self, *, sender: Any, receiver: AddressLike, gas_limit: int,
                         value: int = 0, data: Optional[str] = None,
                         nonce: Optional[int] = None, gas_price: Optional[int] = None) -> TxResult:
        envelope = await self._envelope(sender, nonce, gas_price)
        tx = Tx(receiver=receiver, gas_limit=gas_limit, value=value, data=data, **envelope)
        return await self.proxy.execute_tx(tx)

    async def transfer(self, *, sender: Any, receiver: AddressLike, gas_limit: int,
                       value: int = 0, esdts: Sequence[EsdtLike] = (), data: Optional[str] = None,
                       nonce: Optional[int] = None, gas_price: Optional[int] = None) -> TxResult:
        envelope = await self._envelope(sender, nonce, gas_price)
        tx = TransferTx(receiver=receiver, gas_limit=gas_limit, value=value,
                        esdts=tuple(esdts), data=data, **envelope)
        return await self.proxy.transfer(tx)

    async def deploy_contract(self, *, sender: Any, code: str,
                              code_metadata: EncodableCodeMetadata, gas_limit: int,
                              code_args: Sequence[BytesLike] = (), value: int = 0,
                              nonce: Optional[int] = None,
                              gas_price: Optional[int] = None) -> DeployContractResult:
        envelope = await self._envelope(sender, nonce, gas_price)
        tx = DeployContractTx(code=expand_code(code), code_metadata=code_metadata,
                              code_args=tuple(code_args), gas_limit=gas_limit, value=value,
                              **envelope)
        return await self.proxy.deploy_contract(tx)

    async def call_contract(self, *, sender: Any, callee: AddressLike, func_name: str,
                            gas_limit: int, func_args: Sequence[BytesLike] = (),
                            value: int = 0, esdts: Sequence[EsdtLike] = (),
                            nonce: Optional[int] = None,
                            gas_price: Optional[int] = None) -> CallContractResult:
        envelope = await self._envelope(sender, nonce, gas_price)
        tx = CallContractTx(callee=callee, func_name=func_name, func_args=tuple(func_args),
                            esdts=tuple(esdts), gas_limit=gas_limit, value=value, **envelope)
        return await self.proxy.call_contract(tx)

    async def upgrade_contract(self, *, sender: Any, callee: AddressLike, code: str,
                               code_metadata: EncodableCodeMetadata, gas_limit: int,
                               code_args: Sequence[BytesLike] = (), value: int = 0,
                               nonce: Optional[int] = None,
                               gas_price: Optional[int] = None) -> CallContractResult:
        envelope = await self._envelope(sender, nonce, gas_price)
        tx = UpgradeContractTx(callee=callee, code=expand_code(code), code_metadata=code_metadata,
                               code_args=tuple(code_args), gas_limit=gas_limit, value=value,
                               **envelope)
        return await self.proxy.upgrade_contract(tx)

    async def query(self, *, callee: AddressLike, func_name: str,
                    func_args: Sequence[BytesLike] = (), sender: Optional[AddressLike] = None,
                    value: Optional[int] = None) -> QueryResult:
        return await self.proxy.query(Query(callee=callee, func_name=func_name,
                                            func_args=tuple(func_args), sender=sender, value=value))

    async def get_account_nonce(self, address: AddressLike) -> int:
        return await self.proxy.get_account_nonce(address)

    async def get_account_balance(self, address: AddressLike) -> int:
        return await self.proxy.get_account_balance(address)

    async def get_account_kvs(self, address: AddressLike) -> Dict[str, str]:
        return await self.proxy.get_account_kvs(address)

    async def get_account(self, address: AddressLike) -> Account:
        return await self.proxy.get_account(address)


class _Handle:
    """Common base of wallet and contract handles; address-like."""

    address: Address
    world: World

    def __str__(self) -> str:
        return self.address.bech

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.address.bech}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, _Handle):
            return self.address == other.address
        return self.address == other

    def __hash__(self) -> int:
        return hash(self.address)

    async def get_account_nonce(self) -> int:
        return await self.world.get_account_nonce(self)

    async def get_account_balance(self) -> int:
        return await self.world.get_account_balance(self)

    async def get_account_kvs(self) -> Dict[str, str]:
        return await self.world.get_account_kvs(self)

    async def get_account(self) -> Account:
        return await self.world.get_account(self)


class Wallet(_Handle):
    """An account able to sign, bound to a world."""

    def __init__(self, signer: Signer, world: World):
        self.signer = signer
        self.world = world
        self.address = signer.address

    async def sign(self, data: bytes) -> bytes:
        return await self.signer.sign(data)

    async def execute_tx(self, **params) -> TxResult:
        return await self.world.execute_tx(sender=self, **params)

    async def transfer(self, **params) -> TxResult:
        return await self.world.transfer(sender=self, **params)

    async def deploy_contract(self, **params) -> DeployContractResult:
        return await self.world.deploy_contract(sender=self, **params)

    async def call_contract(self, **params) -> CallContractResult:
        return await self.world.call_contract(sender=self, **params)

    async def upgrade_contract(self, **params) -> CallContractResult:
        return await self.world.upgrade_contract(sender=self, **params)

    async def query(self, **params) -> QueryResult:
        return await self.world.query(sender=self, **params)


class Contract(_Handle):
    """A deployed contract address bound to a world."""

    def __init__(self, address: AddressLike, world: World):
        self.address = address_like_to_address(address)
        self.world = world

    async def query(self, **params) -> QueryResult:
        return await self.world.query(callee=self, **params)
