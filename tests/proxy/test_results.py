"""
Tests for settled transaction and query decoding.
"""

import pytest

from helpers import b64, mk_event, mk_network_status, mk_settled_tx
from xsuite.proxy.results import (
    NetworkStatus, base64_to_hex, check_tx_outcome, decode_account,
    decode_call_contract_result, decode_deploy_contract_result, decode_query_result,
    decode_tx_result, get_tx_return_data,
)
from xsuite.runtime.errors import (
    DecodeError, InteractionError, PendingRaceError, QueryError, SignalError, TxReceiptError,
    TxStatusError,
)

EXPLORER = "https://explorer.example"
DEPLOYED = "erd1qqqqqqqqqqqqqpgqq66xk9gfr4esuhem3jru86wg5hvp33a62jps2fy57p"


class TestDecisionList:
    """Test the ordered failure rules."""

    def test_status_error(self):
        tx = mk_settled_tx(status="fail")
        with pytest.raises(TxStatusError) as exc_info:
            check_tx_outcome(tx)
        err = exc_info.value
        assert err.kind == "errorStatus"
        assert err.code == "fail"
        assert err.msg == "fail"
        assert err.tx_hash == tx["hash"]
        assert err.result is tx

    def test_status_beats_signal_error(self):
        tx = mk_settled_tx(status="invalid", events=[
            mk_event("signalError", topics=[b64("caller"), b64("boom")]),
        ])
        with pytest.raises(TxStatusError):
            check_tx_outcome(tx)

    def test_receipt_error(self):
        tx = mk_settled_tx(receipt={"returnCode": "user error", "returnMessage": "out of funds"})
        with pytest.raises(TxReceiptError) as exc_info:
            check_tx_outcome(tx)
        assert exc_info.value.code == "user error"
        assert exc_info.value.msg == "out of funds"

    def test_empty_receipt_code_is_not_an_error(self):
        check_tx_outcome(mk_settled_tx(receipt={"returnCode": "", "returnMessage": ""}))

    def test_receipt_beats_signal_error(self):
        tx = mk_settled_tx(
            receipt={"returnCode": "user error", "returnMessage": "x"},
            events=[mk_event("signalError", topics=[b64("caller"), b64("boom")])],
        )
        with pytest.raises(TxReceiptError):
            check_tx_outcome(tx)

    def test_signal_error(self):
        tx = mk_settled_tx(events=[mk_event("signalError", topics=[b64("caller"), b64("insufficient funds")])])
        with pytest.raises(SignalError) as exc_info:
            check_tx_outcome(tx)
        err = exc_info.value
        assert err.kind == "signalError"
        assert err.code == "signalError"
        assert err.msg == "insufficient funds"
        assert tx["hash"] in str(err)

    def test_signal_error_without_message_topic(self):
        tx = mk_settled_tx(events=[mk_event("signalError", topics=[b64("caller")])])
        with pytest.raises(DecodeError):
            check_tx_outcome(tx)

    def test_pending_snapshot(self):
        with pytest.raises(PendingRaceError) as exc_info:
            check_tx_outcome(mk_settled_tx(status="pending"))
        assert exc_info.value.msg == "Transaction still pending."

    def test_errors_share_taxonomy(self):
        for tx in (
            mk_settled_tx(status="fail"),
            mk_settled_tx(receipt={"returnCode": "c", "returnMessage": "m"}),
            mk_settled_tx(events=[mk_event("signalError", topics=[b64("a"), b64("m")])]),
        ):
            with pytest.raises(InteractionError) as exc_info:
                check_tx_outcome(tx)
            assert set(exc_info.value.to_dict()) == {"interaction", "kind", "code", "message", "result"}
            assert exc_info.value.interaction == "Transaction"


class TestReturnData:
    """Test return data extraction."""

    def test_write_log(self):
        tx = mk_settled_tx(events=[mk_event("writeLog", data=b64("@6f6b@0041@"))])
        assert get_tx_return_data(tx) == ["0041", ""]

    def test_write_log_wins_over_results(self):
        tx = mk_settled_tx(
            events=[mk_event("writeLog", data=b64("@6f6b@01"))],
            scrs=[{"data": "@6f6b@02"}],
        )
        assert get_tx_return_data(tx) == ["01"]

    def test_smart_contract_result(self):
        tx = mk_settled_tx(scrs=[{"data": "ESDTTransfer@00"}, {"data": "@6f6b@0a@0b"}])
        assert get_tx_return_data(tx) == ["0a", "0b"]

    def test_ok_marker_alone(self):
        assert get_tx_return_data(mk_settled_tx(scrs=[{"data": "@6f6b"}])) == []

    def test_marker_prefix_must_be_exact(self):
        assert get_tx_return_data(mk_settled_tx(scrs=[{"data": "@6f6b6b@01"}])) == []

    def test_no_source(self):
        assert get_tx_return_data(mk_settled_tx()) == []

    def test_malformed_write_log(self):
        tx = mk_settled_tx(events=[mk_event("writeLog", data="not base64!")])
        with pytest.raises(DecodeError):
            get_tx_return_data(tx)


class TestDecodeResults:
    """Test typed result construction."""

    def test_transfer_result(self):
        tx = mk_settled_tx(tx_hash="ab" * 32, gas_used=50_000, fee="57500000000000")
        res = decode_tx_result(tx, EXPLORER)
        assert res.hash == "ab" * 32
        assert res.explorer_url == f"{EXPLORER}/transactions/{'ab' * 32}"
        assert res.gas_used == 50_000
        assert res.fee == 57_500_000_000_000
        assert res.tx["explorerUrl"] == res.explorer_url
        assert res.tx["status"] == "success"

    def test_fee_is_exact_integer(self):
        res = decode_tx_result(mk_settled_tx(fee="123456789012345678901234567890"))
        assert res.fee == 123456789012345678901234567890

    def test_call_result(self):
        tx = mk_settled_tx(events=[mk_event("writeLog", data=b64("@6f6b@0041"))])
        assert decode_call_contract_result(tx, EXPLORER).return_data == ["0041"]

    def test_deploy_result(self):
        tx = mk_settled_tx(events=[
            mk_event("SCDeploy", address=DEPLOYED),
            mk_event("writeLog", data=b64("@6f6b")),
        ])
        res = decode_deploy_contract_result(tx, EXPLORER)
        assert res.address == DEPLOYED
        assert res.return_data == []

    def test_deploy_without_event_is_fatal(self):
        with pytest.raises(RuntimeError, match="SCDeploy"):
            decode_deploy_contract_result(mk_settled_tx(), EXPLORER)

    def test_decoding_is_pure(self):
        tx = mk_settled_tx(events=[mk_event("writeLog", data=b64("@6f6b@01"))])
        first = decode_call_contract_result(tx, EXPLORER)
        second = decode_call_contract_result(tx, EXPLORER)
        assert first == second
        assert "explorerUrl" not in tx


class TestQueryResult:
    """Test query decoding."""

    @pytest.mark.parametrize("code", [0, "ok"])
    def test_success(self, code):
        data = {"returnCode": code, "returnData": [b64(b"\x00\x41"), "", None], "returnMessage": ""}
        res = decode_query_result(data)
        assert res.return_data == ["0041", "", ""]
        assert res.query == data

    def test_missing_return_data(self):
        assert decode_query_result({"returnCode": "ok", "returnData": None}).return_data == []

    def test_failure(self):
        data = {"returnCode": "user error", "returnMessage": "invalid function", "returnData": None}
        with pytest.raises(QueryError) as exc_info:
            decode_query_result(data)
        assert exc_info.value.interaction == "Query"
        assert exc_info.value.code == "user error"
        assert exc_info.value.msg == "invalid function"


class TestModels:
    """Test network status and account models."""

    def test_network_status_aliases(self):
        status = NetworkStatus.model_validate(mk_network_status(epoch=7))
        assert status.epoch == 7
        assert status.round == 130
        assert status.rounds_per_epoch == 20

    def test_account(self):
        account = decode_account({
            "address": "erd1xyz",
            "nonce": 4,
            "balance": "100000000000000000000",
            "code": "0061736d",
            "codeHash": b64(b"\x01\x02"),
            "codeMetadata": b64(b"\x05\x00"),
            "ownerAddress": "erd1owner",
        }, kvs={"6b": "76"})
        assert account.balance == 10**20
        assert account.code_hash == "0102"
        assert account.code_metadata == "0500"
        assert account.owner == "erd1owner"
        assert account.kvs == {"6b": "76"}

    def test_base64_to_hex(self):
        assert base64_to_hex(b64(b"\xff")) == "ff"
        with pytest.raises(DecodeError):
            base64_to_hex(None)
