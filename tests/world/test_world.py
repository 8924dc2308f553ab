"""
Tests for worlds, wallets and contracts.
"""

import base64
import json

import pytest

from helpers import FakeGateway, b64, mk_address, mk_event, mk_settled_tx, mk_signer, ok
from xsuite.codec import e
from xsuite.proxy import Proxy, ProxyConfig
from xsuite.world import NETWORKS, World, expand_code

TX_HASH = "cd" * 32
DEPLOYED = "erd1qqqqqqqqqqqqqpgqq66xk9gfr4esuhem3jru86wg5hvp33a62jps2fy57p"


@pytest.fixture
def world(gateway):
    proxy = Proxy(ProxyConfig(proxy_url="http://gateway.test", explorer_url="https://ex", poll_interval=0))
    gateway.install(proxy)
    return World(proxy=proxy, chain_id="D", gas_price=1_500_000_000)


def script_tx(gateway: FakeGateway, **tx_kwargs):
    gateway.route("/transaction/send", ok({"txHash": TX_HASH}))
    gateway.route(f"/transaction/{TX_HASH}/process-status", ok({"status": "success"}))
    gateway.route(f"/transaction/{TX_HASH}?withResults=true",
                  ok({"transaction": mk_settled_tx(tx_hash=TX_HASH, **tx_kwargs)}))


def sent_tx(gateway: FakeGateway) -> dict:
    return gateway.bodies("/transaction/send")[0]


class TestNetworks:
    """Test well-known network presets."""

    def test_devnet(self):
        world = World.new_devnet()
        assert world.chain_id == "D"
        assert world.proxy.proxy_url == NETWORKS["devnet"].proxy_url
        assert world.proxy.explorer_url == NETWORKS["devnet"].explorer_url
        assert world.gas_price == 1_000_000_000

    def test_testnet_and_mainnet(self):
        assert World.new_testnet().chain_id == "T"
        assert World.new_mainnet(gas_price=2_000_000_000).gas_price == 2_000_000_000
        assert World.new_mainnet().chain_id == "1"

    def test_unknown_network(self):
        with pytest.raises(ValueError, match="Unknown network"):
            World.new_network("localnet")

    def test_custom(self):
        world = World.new(proxy_url="http://localhost:7950", chain_id="local", timeout=5.0)
        assert world.proxy.config.timeout == 5.0
        assert world.chain_id == "local"


class TestExpandCode:
    """Test contract code references."""

    def test_hex_unchanged(self):
        assert expand_code("0061736d") == "0061736d"

    def test_file_reference(self, tmp_path):
        path = tmp_path / "contract.wasm"
        path.write_bytes(b"\x00asm\x01")
        assert expand_code(f"file:{path}") == "0061736d01"


class TestWorldTransactions:
    """Test envelope filling and delegation to the pipeline."""

    @pytest.mark.asyncio
    async def test_transfer_fetches_nonce(self, world, gateway):
        signer = mk_signer(1)
        gateway.route(f"/address/{signer.address.bech}/nonce", ok({"nonce": 42}))
        script_tx(gateway)

        res = await world.transfer(sender=signer, receiver=mk_address(2), value=10, gas_limit=50_000)

        assert res.hash == TX_HASH
        body = sent_tx(gateway)
        assert body["nonce"] == 42
        assert body["gasPrice"] == 1_500_000_000
        assert body["chainID"] == "D"
        assert body["value"] == "10"

    @pytest.mark.asyncio
    async def test_explicit_nonce_and_gas_price(self, world, gateway):
        script_tx(gateway)
        await world.transfer(sender=mk_signer(1), receiver=mk_address(2), gas_limit=50_000,
                             nonce=3, gas_price=2)
        body = sent_tx(gateway)
        assert (body["nonce"], body["gasPrice"]) == (3, 2)
        assert not any(path.endswith("/nonce") for path in gateway.paths())

    @pytest.mark.asyncio
    async def test_execute_tx(self, world, gateway):
        script_tx(gateway)
        await world.execute_tx(sender=mk_signer(1), receiver=mk_address(2), gas_limit=50_000,
                               data="hello", nonce=0)
        assert base64.b64decode(sent_tx(gateway)["data"]) == b"hello"


class TestWallet:
    """Test wallet handles."""

    @pytest.mark.asyncio
    async def test_wallet_signs_as_sender(self, world, gateway):
        wallet = world.new_wallet(mk_signer(1))
        script_tx(gateway, events=[mk_event("writeLog", data=b64("@6f6b@01"))])

        res = await wallet.call_contract(callee=mk_address(2), func_name="inc",
                                         func_args=[e.U(1)], gas_limit=5_000_000, nonce=0)

        assert res.return_data == ["01"]
        body = sent_tx(gateway)
        assert body["sender"] == wallet.address.bech
        assert base64.b64decode(body["data"]) == b"inc@01"
        assert wallet.signer.verify(bytes.fromhex(body["signature"]), _unsigned(body))

    @pytest.mark.asyncio
    async def test_wallet_deploys_file_code(self, world, gateway, tmp_path):
        path = tmp_path / "adder.wasm"
        path.write_bytes(b"\x00asm")
        wallet = world.new_wallet(mk_signer(1))
        script_tx(gateway, events=[mk_event("SCDeploy", address=DEPLOYED)])

        res = await wallet.deploy_contract(code=f"file:{path}", code_metadata=["upgradeable"],
                                           code_args=[e.U(5)], gas_limit=10_000_000, nonce=0)

        assert res.address == DEPLOYED
        body = sent_tx(gateway)
        assert body["receiver"] == "erd1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq6gq4hu"
        assert base64.b64decode(body["data"]) == b"0061736d@0500@0100@05"

    @pytest.mark.asyncio
    async def test_wallet_balance(self, world, gateway):
        wallet = world.new_wallet(mk_signer(1))
        gateway.route(f"/address/{wallet.address.bech}/balance", ok({"balance": "7"}))
        assert await wallet.get_account_balance() == 7

    def test_wallet_is_address_like(self, world):
        wallet = world.new_wallet(mk_signer(1))
        assert wallet == wallet.address
        assert str(wallet) == wallet.address.bech


class TestContract:
    """Test contract handles."""

    @pytest.mark.asyncio
    async def test_query(self, world, gateway):
        contract = world.new_contract(mk_address(9))
        gateway.route("/vm-values/query", ok({"data": {"returnCode": "ok", "returnData": [b64(b"\x05")]}}))

        res = await contract.query(func_name="getSum")

        assert res.return_data == ["05"]
        assert gateway.bodies("/vm-values/query")[0]["scAddress"] == mk_address(9).bech

    @pytest.mark.asyncio
    async def test_upgrade(self, world, gateway):
        wallet = world.new_wallet(mk_signer(1))
        contract = world.new_contract(mk_address(9))
        script_tx(gateway, scrs=[{"data": "@6f6b"}])

        await wallet.upgrade_contract(callee=contract, code="0061736d", code_metadata="0100",
                                      gas_limit=10_000_000, nonce=0)

        body = sent_tx(gateway)
        assert body["receiver"] == contract.address.bech
        assert base64.b64decode(body["data"]) == b"upgradeContract@0061736d@0100"


def _unsigned(body: dict) -> bytes:
    fields = {k: v for k, v in body.items() if k != "signature"}
    return json.dumps(fields, separators=(",", ":")).encode()
