"""
Simulated network controller.

``FSWorld`` owns a chain simulator child process: it spawns the binary,
waits for the gateway URL announced on stdout and terminates the process
when done. On top of the regular ``World`` operations it injects account
state directly and drives the simulated clock.

Example:
    async with await FSWorld.start(binary_path="/opt/chainsimulator") as world:
        wallet = await world.create_wallet(balance=10**18)
        ...
"""

from __future__ import annotations
import asyncio
import logging
import re
import secrets
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ConfigDict

from ..proxy.fsproxy import AccountState, AccountStateLike, FSProxy, to_account_state
from ..proxy.gateway import ProxyConfig
from ..proxy.results import DeployContractResult
from ..runtime.address import ADDRESS_LENGTH, Address, AddressLike, shard_of
from ..runtime.errors import SimulnetError, SimulnetStartError
from ..signers.signer import DummySigner, Signer
from .world import DEFAULT_GAS_PRICE, Contract, Wallet, World, expand_code

logger = logging.getLogger(__name__)

CHAIN_ID = "chain"
READY_PATTERN = re.compile(r"chain simulator's is accessible through the URL ([\w\d.:]+)")
STDERR_CHUNK = 4096
CONTRACT_ADDRESS_PREFIX = bytes(8) + bytes.fromhex("0500")


@dataclass
class SimulnetConfig:
    """
    Location and startup flags of the chain simulator binary.

    Override configs are applied in list order, later files winning on
    overlapping keys. ``node_override_config_path`` is appended last.
    """

    binary_path: str = "chainsimulator"
    configs_path: str = "config"
    port: int = 0
    binary_config_path: Optional[str] = None
    proxy_configs_path: Optional[str] = None
    node_configs_path: Optional[str] = None
    node_override_config_paths: Optional[List[str]] = None
    node_override_config_path: Optional[str] = None
    download_configs: bool = False
    start_timeout: Optional[float] = None

    def override_config_paths(self) -> List[str]:
        if self.node_override_config_paths is not None:
            paths = list(self.node_override_config_paths)
        else:
            paths = [
                f"{self.configs_path}/nodeOverrideDefault.toml",
                f"{self.configs_path}/nodeOverride.toml",
            ]
        if self.node_override_config_path is not None:
            paths.append(self.node_override_config_path)
        return paths

    def build_args(self) -> List[str]:
        args = [
            "--server-port", str(self.port),
            "--config", self.binary_config_path or f"{self.configs_path}/config.toml",
            "--proxy-configs", self.proxy_configs_path or f"{self.configs_path}/proxy/config",
            "--node-configs", self.node_configs_path or f"{self.configs_path}/node/config",
        ]
        overrides = self.override_config_paths()
        if overrides:
            args += ["--node-override-config", ",".join(overrides)]
        if not self.download_configs:
            args.append("--skip-configs-download")
        return args


def random_address(contract: bool = False, shard: Optional[int] = None) -> Address:
    """Random wallet or contract address, optionally in a given shard."""
    while True:
        if contract:
            data = CONTRACT_ADDRESS_PREFIX + secrets.token_bytes(ADDRESS_LENGTH - len(CONTRACT_ADDRESS_PREFIX))
        else:
            data = secrets.token_bytes(ADDRESS_LENGTH)
        if shard is None or shard_of(data) == shard:
            return Address(data)


async def _scan_stdout(reader: asyncio.StreamReader) -> str:
    while True:
        try:
            line = await reader.readline()
        except (ValueError, asyncio.LimitOverrunError) as err:
            raise SimulnetStartError(
                f"Simulnet output line too long before ready: {err}", cause=err
            ) from err
        if not line:
            raise SimulnetStartError("Simulnet process exited before announcing its URL")
        text = line.decode("utf-8", errors="replace").rstrip()
        logger.debug(f"simulnet: {text}")
        match = READY_PATTERN.search(text)
        if match:
            return f"http://{match.group(1)}"


async def _wait_ready(server: asyncio.subprocess.Process) -> str:
    stdout_task = asyncio.ensure_future(_scan_stdout(server.stdout))
    stderr_task = asyncio.ensure_future(server.stderr.read(STDERR_CHUNK))
    try:
        done, _ = await asyncio.wait({stdout_task, stderr_task},
                                     return_when=asyncio.FIRST_COMPLETED)
        if stderr_task in done and stderr_task.result():
            raise SimulnetStartError(stderr_task.result().decode("utf-8", errors="replace"))
        return await stdout_task
    finally:
        for task in (stdout_task, stderr_task):
            if not task.done():
                task.cancel()


async def _drain(reader: asyncio.StreamReader, level: int) -> None:
    while True:
        try:
            line = await reader.readline()
        except (ValueError, asyncio.LimitOverrunError) as err:
            # readline already discarded the oversized chunk
            logger.warning(f"simulnet: skipped oversized output line ({err})")
            continue
        if not line:
            return
        logger.log(level, f"simulnet: {line.decode('utf-8', errors='replace').rstrip()}")


class FSDeployContractResult(DeployContractResult):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    contract: FSContract


class FSWorld(World):
    """World backed by a chain simulator."""

    proxy: FSProxy

    def __init__(self, proxy: FSProxy, gas_price: int = DEFAULT_GAS_PRICE,
                 server: Optional[asyncio.subprocess.Process] = None):
        super().__init__(proxy=proxy, chain_id=CHAIN_ID, gas_price=gas_price)
        self.server = server
        self._drains: List[asyncio.Task] = []

    @classmethod
    def new(cls, proxy_url: str, gas_price: int = DEFAULT_GAS_PRICE, explorer_url: str = "",
            server: Optional[asyncio.subprocess.Process] = None, **config) -> FSWorld:
        proxy = FSProxy(ProxyConfig(proxy_url=proxy_url, explorer_url=explorer_url, **config))
        return cls(proxy=proxy, gas_price=gas_price, server=server)

    @classmethod
    def new_network(cls, name: str, **options) -> World:
        raise NotImplementedError(f"A simulated network cannot connect to {name}")

    @classmethod
    async def start(cls, config: Optional[SimulnetConfig] = None, *,
                    gas_price: int = DEFAULT_GAS_PRICE, explorer_url: str = "",
                    **options) -> FSWorld:
        """
        Spawn a chain simulator and connect to it.

        Args:
            config: Simulator location and flags; built from ``options`` if omitted
            gas_price: Default gas price of the world
            explorer_url: Explorer base URL for result links

        Raises:
            SimulnetStartError: If the process cannot be spawned, writes to
                stderr, or exits before announcing its URL
        """
        config = config or SimulnetConfig(**options)
        args = config.build_args()
        logger.info(f"Starting simulnet: {config.binary_path} {' '.join(args)}")
        try:
            server = await asyncio.create_subprocess_exec(
                config.binary_path, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SimulnetStartError(f"Failed to spawn {config.binary_path}: {e}", cause=e) from e

        try:
            proxy_url = await asyncio.wait_for(_wait_ready(server), timeout=config.start_timeout)
        except asyncio.TimeoutError as e:
            await _kill(server)
            raise SimulnetStartError(
                f"Simulnet did not announce its URL within {config.start_timeout}s", cause=e
            ) from e
        except BaseException:
            # includes cancellation by the caller
            await _kill(server)
            raise

        logger.info(f"Simulnet ready at {proxy_url}")
        world = cls.new(proxy_url=proxy_url, gas_price=gas_price,
                        explorer_url=explorer_url, server=server)
        world._drains = [
            asyncio.ensure_future(_drain(server.stdout, logging.DEBUG)),
            asyncio.ensure_future(_drain(server.stderr, logging.ERROR)),
        ]
        return world

    async def terminate(self) -> None:
        """Stop the simulator process and release the gateway session."""
        if self.server is None:
            raise SimulnetError("No server defined.")
        server, self.server = self.server, None
        await _kill(server)
        for task in self._drains:
            task.cancel()
        await asyncio.gather(*self._drains, return_exceptions=True)
        self._drains = []
        await self.proxy.close()
        logger.info("Simulnet terminated")

    async def close(self) -> None:
        if self.server is not None:
            await self.terminate()
        else:
            await super().close()

    # Handles

    def new_wallet(self, signer: Signer | AddressLike) -> FSWallet:
        if not isinstance(signer, Signer):
            signer = DummySigner(signer)
        return FSWallet(signer=signer, world=self)

    def new_contract(self, address: AddressLike) -> FSContract:
        return FSContract(address=address, world=self)

    async def create_wallets(self, params: Sequence[Dict[str, Any]]) -> List[FSWallet]:
        accounts = [self._new_account_state(p, contract=False) for p in params]
        await self.set_accounts(accounts)
        return [self.new_wallet(a.address) for a in accounts]

    async def create_wallet(self, **params) -> FSWallet:
        wallets = await self.create_wallets([params])
        return wallets[0]

    async def create_contracts(self, params: Sequence[Dict[str, Any]]) -> List[FSContract]:
        accounts = [self._new_account_state(p, contract=True) for p in params]
        await self.set_accounts(accounts)
        return [self.new_contract(a.address) for a in accounts]

    async def create_contract(self, **params) -> FSContract:
        contracts = await self.create_contracts([params])
        return contracts[0]

    @staticmethod
    def _new_account_state(params: Dict[str, Any], contract: bool) -> AccountState:
        params = dict(params)
        address = params.pop("address", None)
        shard = params.pop("shard", None)
        if address is None:
            address = random_address(contract=contract, shard=shard)
        return AccountState(address=address, **params)

    # Simulator controls

    async def get_initial_addresses(self) -> List[str]:
        return await self.proxy.get_initial_addresses()

    async def set_accounts(self, accounts: Sequence[AccountStateLike]) -> None:
        states = []
        for account in accounts:
            state = to_account_state(account)
            if state.code is not None:
                state = replace(state, code=expand_code(state.code))
            states.append(state)
        await self.proxy.set_accounts(states)

    async def set_account(self, account: AccountStateLike) -> None:
        await self.set_accounts([account])

    async def generate_blocks(self, num_blocks: int) -> None:
        await self.proxy.generate_blocks(num_blocks)

    async def advance_to_epoch(self, epoch: int) -> None:
        await self.proxy.advance_to_epoch(epoch)

    async def advance_epoch(self, epochs: int = 1) -> None:
        status = await self.proxy.get_network_status(0)
        await self.advance_to_epoch(status.epoch + epochs)

    async def process_tx(self, tx_hash: str) -> None:
        await self.proxy.process_tx(tx_hash)

    async def deploy_contract(self, **params) -> FSDeployContractResult:
        res = await super().deploy_contract(**params)
        return FSDeployContractResult(**res.model_dump(), contract=self.new_contract(res.address))


async def _kill(server: asyncio.subprocess.Process) -> None:
    if server.returncode is None:
        try:
            server.terminate()
        except ProcessLookupError:
            # already exited
            pass
    await server.wait()


class FSWallet(Wallet):
    world: FSWorld

    async def set_account(self, **params) -> None:
        await self.world.set_account({**params, "address": self})

    async def create_contract(self, **params) -> FSContract:
        return await self.world.create_contract(**params, owner=self)


class FSContract(Contract):
    world: FSWorld

    async def set_account(self, **params) -> None:
        await self.world.set_account({**params, "address": self})


FSDeployContractResult.model_rebuild()
