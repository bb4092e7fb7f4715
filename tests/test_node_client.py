import socket
from contextlib import asynccontextmanager

import pytest
from aiohttp import test_utils, web

from hyperion.core.block import Block
from hyperion.core.blockchain import Blockchain
from hyperion.core.consensus import mine_block
from hyperion.core.crypto import HASH_SIZE
from hyperion.core.header import Header
from hyperion.core.transaction import Transaction
from hyperion.miner.node_client import NodeClient, NodeClientError
from hyperion.node.handlers import NodeState
from hyperion.node.mempool import Mempool
from hyperion.node.rpc_types import MiningInfo as NodeMiningInfo
from hyperion.node.rpc_types import RpcError as NodeRpcError
from hyperion.node.server import create_app


@asynccontextmanager
async def serving(app):
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield f"http://{server.host}:{server.port}"
    finally:
        await server.close()


def fake_node(reply, seen=None):
    async def handler(request):
        body = await request.json()
        if seen is not None:
            seen.append(body)
        return web.json_response(reply(body))

    app = web.Application()
    app.router.add_post("/rpc", handler)
    return app


def mining_info_dict():
    return NodeMiningInfo(1, 0, 0, 1.0, 0.0, 0, "hyperion").to_dict()


def node_state(tmp_path):
    mempool = Mempool()
    mempool.add_tx(Transaction([b"in"], [b"out"]))
    return NodeState(Blockchain.with_genesis(), mempool, chain_path=tmp_path / "chain.dat")


@pytest.mark.asyncio
async def test_mine_and_submit_against_real_node(tmp_path):
    state = node_state(tmp_path)
    async with serving(create_app(state)) as url, NodeClient(url) as client:
        await client.test_connection()
        template = await client.get_block_template()
        assert template.height == 1
        assert len(template.transactions) == 1

        header = Header(
            template.version,
            template.timestamp,
            template.difficulty_compact,
            0,
            bytes.fromhex(template.previous_block_hash),
            bytes.fromhex(template.merkle_root),
        )
        mine_block(header)
        accepted = await client.submit_block(Block(header, template.transactions))

        assert accepted is True
        assert len(state.chain) == 2
        info = await client.get_mining_info()
        assert info.blocks == 2
        assert info.chain == "hyperion"


@pytest.mark.asyncio
async def test_rejected_block_returns_false(tmp_path):
    state = node_state(tmp_path)
    tx = Transaction([b"in"], [b"out"])
    block = Block.with_merkle(Header(1, 0, 0x207FFFFF, 0, bytes(HASH_SIZE), bytes(HASH_SIZE)), [tx])
    async with serving(create_app(state)) as url, NodeClient(url) as client:
        assert await client.submit_block(block) is False
    assert len(state.chain) == 1


@pytest.mark.asyncio
async def test_request_ids_increase_from_one():
    seen = []

    def reply(body):
        return {"jsonrpc": "2.0", "id": body["id"], "result": mining_info_dict(), "error": None}

    async with serving(fake_node(reply, seen)) as url, NodeClient(url) as client:
        await client.get_mining_info()
        await client.get_mining_info()
    assert [body["id"] for body in seen] == [1, 2]
    assert all(body["method"] == "get_mining_info" for body in seen)
    assert all(body["params"] is None for body in seen)


@pytest.mark.asyncio
async def test_rpc_error_is_raised_for_template():
    def reply(body):
        return {
            "jsonrpc": "2.0",
            "id": body["id"],
            "result": None,
            "error": NodeRpcError.method_not_found().to_dict(),
        }

    async with serving(fake_node(reply)) as url, NodeClient(url) as client:
        with pytest.raises(NodeClientError, match="RPC error: Method not found"):
            await client.get_block_template()


@pytest.mark.asyncio
async def test_rpc_error_on_submit_returns_false():
    def reply(body):
        return {
            "jsonrpc": "2.0",
            "id": body["id"],
            "result": None,
            "error": NodeRpcError.invalid_params("Missing block data").to_dict(),
        }

    block = Block.with_merkle(
        Header(1, 0, 0x207FFFFF, 0, bytes(HASH_SIZE), bytes(HASH_SIZE)),
        [Transaction([b"in"], [b"out"])],
    )
    async with serving(fake_node(reply)) as url, NodeClient(url) as client:
        assert await client.submit_block(block) is False


@pytest.mark.asyncio
async def test_missing_result_is_an_error():
    def reply(body):
        return {"jsonrpc": "2.0", "id": body["id"], "result": None, "error": None}

    async with serving(fake_node(reply)) as url, NodeClient(url) as client:
        with pytest.raises(NodeClientError, match="Missing result"):
            await client.get_block_template()


@pytest.mark.asyncio
async def test_http_error_status():
    async def handler(request):
        return web.Response(status=500, text="boom")

    app = web.Application()
    app.router.add_post("/rpc", handler)
    async with serving(app) as url, NodeClient(url) as client:
        with pytest.raises(NodeClientError, match="HTTP error: 500"):
            await client.get_block_template()


@pytest.mark.asyncio
async def test_unreachable_node_fails_connection_test():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    async with NodeClient(f"http://127.0.0.1:{port}") as client:
        with pytest.raises(NodeClientError):
            await client.test_connection()