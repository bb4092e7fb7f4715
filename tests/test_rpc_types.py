import pytest

from hyperion.core.transaction import Transaction
from hyperion.node.rpc_types import (
    BlockTemplate,
    ChainInfo,
    MiningInfo,
    RpcError,
    RpcRequest,
    SubmitBlockParams,
    SubmitBlockResult,
)


def test_method_not_found():
    err = RpcError.method_not_found()
    assert err.to_dict() == {"code": -32601, "message": "Method not found", "data": None}


def test_invalid_params_prefixes_message():
    err = RpcError.invalid_params("bad")
    assert err.code == -32602
    assert err.message == "Invalid params: bad"


def test_internal_error_prefixes_message():
    err = RpcError.internal_error("boom")
    assert err.code == -32603
    assert err.message == "Internal error: boom"


def test_custom_keeps_code_and_message():
    err = RpcError.custom(-1, "oops")
    assert (err.code, err.message, err.data) == (-1, "oops", None)
    assert str(err) == "oops"


def test_request_from_dict_without_params():
    req = RpcRequest.from_dict({"jsonrpc": "2.0", "id": 1, "method": "get_block_count"})
    assert req == RpcRequest("2.0", 1, "get_block_count", None)


def test_request_keeps_null_id_and_params():
    req = RpcRequest.from_dict({"jsonrpc": "2.0", "id": None, "method": "m", "params": {"a": 1}})
    assert req.id is None
    assert req.params == {"a": 1}


@pytest.mark.parametrize(
    "obj",
    [
        {"id": 1, "method": "m"},
        {"jsonrpc": "2.0", "method": "m"},
        {"jsonrpc": "2.0", "id": 1},
        {"jsonrpc": "2.0", "id": 1, "method": 5},
        ["not", "an", "object"],
    ],
)
def test_request_from_dict_rejects_malformed(obj):
    with pytest.raises(ValueError):
        RpcRequest.from_dict(obj)


def test_submit_params_from_dict():
    assert SubmitBlockParams.from_dict({"block_hex": "abcd"}).block_hex == "abcd"
    with pytest.raises(ValueError):
        SubmitBlockParams.from_dict({})


def test_block_template_to_dict_serializes_transactions():
    tx = Transaction([b"in"], [b"out"])
    template = BlockTemplate(1, "00" * 32, [tx], 0x207FFFFF, 42, 3, "11" * 32)
    data = template.to_dict()
    assert data["transactions"] == [tx.to_json()]
    assert Transaction.from_json(data["transactions"][0]) == tx
    assert data["height"] == 3
    assert data["previous_block_hash"] == "00" * 32


def test_submit_result_to_dict():
    assert SubmitBlockResult(False, "InvalidPoW").to_dict() == {
        "accepted": False,
        "message": "InvalidPoW",
    }


def test_mining_and_chain_info_to_dict():
    info = MiningInfo(1, 0, 0, 2.0, 0.0, 5, "hyperion")
    assert info.to_dict()["pooled_tx"] == 5
    assert info.to_dict()["chain"] == "hyperion"
    chain_info = ChainInfo("hyperion", 2, 2, "ab", 1.0, 9)
    assert chain_info.to_dict()["median_time"] == 9
    assert set(chain_info.to_dict()) == {
        "chain",
        "blocks",
        "headers",
        "best_blockhash",
        "difficulty",
        "median_time",
    }