"""
Transaction pipeline.

``Proxy`` drives a transaction through send, await and resolve against a
gateway, and exposes the read-only queries (contract queries, network status,
accounts) built on the same client.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, Optional

from ..runtime.address import AddressLike, address_like_to_bech
from ..runtime.errors import PendingRaceError, TxCancelledError, TxTimeoutError
from ..tx.codec import BroadTx, broad_tx_to_raw_tx
from ..tx.encoder import query_to_raw_query
from ..tx.types import (
    CallContractTx, DeployContractTx, Query, RawQuery, TransferTx, UpgradeContractTx,
)
from .gateway import GatewayClient
from .results import (
    PENDING_STATUS, Account, CallContractResult, DeployContractResult, NetworkStatus,
    QueryResult, TxResult, decode_account, decode_call_contract_result,
    decode_deploy_contract_result, decode_query_result, decode_tx_result,
)

logger = logging.getLogger(__name__)


def _shard_query(shard_id: Optional[int]) -> str:
    return f"?forced-shard-id={shard_id}" if shard_id is not None else ""


class Proxy(GatewayClient):
    """
    Gateway client with the transaction pipeline on top.

    Each ``execute`` style method is ``send`` then ``await_tx`` then the
    matching ``resolve``; the steps are also public for callers that want to
    submit several transactions before waiting on them.
    """

    # Send

    async def send_tx(self, tx: BroadTx) -> str:
        """
        Sign and submit a transaction.

        Returns:
            The transaction hash assigned by the gateway
        """
        raw_tx = await broad_tx_to_raw_tx(tx)
        res = await self.fetch("/transaction/send", raw_tx.to_dict())
        tx_hash = res["txHash"]
        logger.debug(f"Sent transaction {tx_hash} from {raw_tx.sender} (nonce {raw_tx.nonce})")
        return tx_hash

    async def send_transfer(self, tx: TransferTx) -> str:
        return await self.send_tx(tx)

    async def send_deploy_contract(self, tx: DeployContractTx) -> str:
        return await self.send_tx(tx)

    async def send_call_contract(self, tx: CallContractTx) -> str:
        return await self.send_tx(tx)

    async def send_upgrade_contract(self, tx: UpgradeContractTx) -> str:
        return await self.send_tx(tx)

    # Await

    async def await_tx(self, tx_hash: str, *, timeout: Optional[float] = None,
                       cancel: Optional[asyncio.Event] = None) -> str:
        """
        Poll the process status until the transaction is no longer pending.

        Args:
            tx_hash: Hash returned by ``send_tx``
            timeout: Optional bound on the total wait, in seconds
            cancel: Optional event; setting it stops the wait

        Returns:
            The settled process status

        Raises:
            TxTimeoutError: If the deadline passes first
            TxCancelledError: If ``cancel`` is set first
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        polls = 0
        while True:
            if cancel is not None and cancel.is_set():
                raise TxCancelledError(tx_hash)
            status = await self.get_tx_process_status(tx_hash)
            polls += 1
            if status != PENDING_STATUS:
                logger.debug(f"Transaction {tx_hash} settled as '{status}' after {polls} polls")
                return status
            delay = self.config.poll_interval
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise TxTimeoutError(tx_hash, timeout)
                delay = min(delay, remaining)
            await self._sleep(delay, cancel)

    @staticmethod
    async def _sleep(delay: float, cancel: Optional[asyncio.Event]) -> None:
        if cancel is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    # Resolve

    async def _get_settled_tx(self, tx_hash: str) -> Dict[str, Any]:
        status = await self.get_tx_process_status(tx_hash)
        if status == PENDING_STATUS:
            raise PendingRaceError(tx_hash, {"hash": tx_hash, "status": status})
        return await self.get_tx(tx_hash)

    async def resolve_tx(self, tx_hash: str) -> TxResult:
        """
        Decode a settled transaction.

        Raises:
            PendingRaceError: If the transaction still reads pending
            TxError: If the transaction failed on chain
        """
        tx = await self._get_settled_tx(tx_hash)
        res = decode_tx_result(tx, self.explorer_url, tx_hash)
        logger.info(f"Transaction {res.hash} succeeded (gas used {res.gas_used})")
        return res

    async def resolve_transfer(self, tx_hash: str) -> TxResult:
        return await self.resolve_tx(tx_hash)

    async def resolve_call_contract(self, tx_hash: str) -> CallContractResult:
        tx = await self._get_settled_tx(tx_hash)
        res = decode_call_contract_result(tx, self.explorer_url, tx_hash)
        logger.info(f"Call {res.hash} succeeded with {len(res.return_data)} return values")
        return res

    async def resolve_deploy_contract(self, tx_hash: str) -> DeployContractResult:
        tx = await self._get_settled_tx(tx_hash)
        res = decode_deploy_contract_result(tx, self.explorer_url, tx_hash)
        logger.info(f"Deploy {res.hash} created contract {res.address}")
        return res

    async def resolve_upgrade_contract(self, tx_hash: str) -> CallContractResult:
        return await self.resolve_call_contract(tx_hash)

    # Execute

    async def execute_tx(self, tx: BroadTx, **await_options) -> TxResult:
        tx_hash = await self.send_tx(tx)
        await self.await_tx(tx_hash, **await_options)
        return await self.resolve_tx(tx_hash)

    async def transfer(self, tx: TransferTx, **await_options) -> TxResult:
        tx_hash = await self.send_transfer(tx)
        await self.await_tx(tx_hash, **await_options)
        return await self.resolve_transfer(tx_hash)

    async def deploy_contract(self, tx: DeployContractTx, **await_options) -> DeployContractResult:
        tx_hash = await self.send_deploy_contract(tx)
        await self.await_tx(tx_hash, **await_options)
        return await self.resolve_deploy_contract(tx_hash)

    async def call_contract(self, tx: CallContractTx, **await_options) -> CallContractResult:
        tx_hash = await self.send_call_contract(tx)
        await self.await_tx(tx_hash, **await_options)
        return await self.resolve_call_contract(tx_hash)

    async def upgrade_contract(self, tx: UpgradeContractTx, **await_options) -> CallContractResult:
        tx_hash = await self.send_upgrade_contract(tx)
        await self.await_tx(tx_hash, **await_options)
        return await self.resolve_upgrade_contract(tx_hash)

    # Reads

    async def query(self, query: Query | RawQuery) -> QueryResult:
        """
        Run a read-only contract call.

        Raises:
            QueryError: If the virtual machine returns a non-ok code
        """
        raw_query = query_to_raw_query(query)
        res = await self.fetch("/vm-values/query", raw_query.to_dict())
        return decode_query_result(res["data"])

    async def get_network_status(self, shard: int) -> NetworkStatus:
        res = await self.fetch(f"/network/status/{shard}")
        return NetworkStatus.model_validate(res["status"])

    async def get_tx(self, tx_hash: str, with_results: bool = True) -> Dict[str, Any]:
        path = f"/transaction/{tx_hash}"
        if with_results:
            path += "?withResults=true"
        res = await self.fetch(path)
        return res["transaction"]

    async def get_tx_without_results(self, tx_hash: str) -> Dict[str, Any]:
        return await self.get_tx(tx_hash, with_results=False)

    async def get_tx_process_status(self, tx_hash: str) -> str:
        res = await self.fetch(f"/transaction/{tx_hash}/process-status")
        return res["status"]

    async def get_account_nonce(self, address: AddressLike, *,
                                shard_id: Optional[int] = None) -> int:
        bech = address_like_to_bech(address)
        res = await self.fetch(f"/address/{bech}/nonce{_shard_query(shard_id)}")
        return int(res["nonce"])

    async def get_account_balance(self, address: AddressLike, *,
                                  shard_id: Optional[int] = None) -> int:
        bech = address_like_to_bech(address)
        res = await self.fetch(f"/address/{bech}/balance{_shard_query(shard_id)}")
        return int(res["balance"])

    async def get_account_kvs(self, address: AddressLike, *,
                              shard_id: Optional[int] = None) -> Dict[str, str]:
        bech = address_like_to_bech(address)
        res = await self.fetch(f"/address/{bech}/keys{_shard_query(shard_id)}")
        return res.get("pairs") or {}

    async def get_account_without_kvs(self, address: AddressLike, *,
                                      shard_id: Optional[int] = None) -> Account:
        bech = address_like_to_bech(address)
        res = await self.fetch(f"/address/{bech}{_shard_query(shard_id)}")
        return decode_account(res["account"], kvs={})

    async def get_account(self, address: AddressLike, *,
                          shard_id: Optional[int] = None) -> Account:
        """Account state including its storage, fetched concurrently."""
        account, kvs = await asyncio.gather(
            self.get_account_without_kvs(address, shard_id=shard_id),
            self.get_account_kvs(address, shard_id=shard_id),
        )
        return account.model_copy(update={"kvs": kvs})
