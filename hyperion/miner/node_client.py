"""HTTP JSON-RPC client for talking to a node."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from hyperion.core.block import Block
from hyperion.core.errors import HyperionError
from hyperion.miner.messages import (
    JSONRPC_VERSION,
    BlockTemplate,
    MiningInfo,
    RpcRequest,
    RpcResponse,
    SubmitBlockRequest,
    SubmitBlockResponse,
)

_log = logging.getLogger(__name__)

_U32_MASK = 0xFFFFFFFF


class NodeClientError(HyperionError):
    """A request to the node failed."""


class NodeClient:
    """Client for a node's JSON-RPC endpoint at ``<base_url>/rpc``."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self._next_id = 1
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> NodeClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _take_request_id(self) -> int:
        request_id = self._next_id
        self._next_id = (request_id + 1) & _U32_MASK
        return request_id

    async def _call(
        self, method: str, params: Any, result_type: Any, *, check_status: bool = True
    ) -> RpcResponse:
        request = RpcRequest(JSONRPC_VERSION, self._take_request_id(), method, params)
        url = f"{self.base_url}/rpc"
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        try:
            async with self._session.post(url, json=request.to_dict()) as response:
                if check_status and not 200 <= response.status < 300:
                    raise NodeClientError(
                        f"HTTP error: {response.status} {response.reason or ''}".rstrip()
                    )
                body = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise NodeClientError(f"request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise NodeClientError(f"invalid JSON in response: {exc}") from exc
        try:
            return RpcResponse.from_dict(body, result_type)
        except ValueError as exc:
            raise NodeClientError(f"invalid RPC response: {exc}") from exc

    async def get_block_template(self) -> BlockTemplate:
        """Fetch a block template to mine on."""
        _log.debug("Requesting block template from node")
        response = await self._call("get_block_template", None, BlockTemplate)
        if response.error is not None:
            raise NodeClientError(f"RPC error: {response.error.message}")
        if response.result is None:
            raise NodeClientError("Missing result in RPC response")
        return response.result

    async def submit_block(self, block: Block) -> bool:
        """Submit a mined block; return whether the node accepted it."""
        _log.debug("Submitting mined block to node")
        params = SubmitBlockRequest(block.serialize().hex()).to_dict()
        response = await self._call("submit_block", params, SubmitBlockResponse)
        if response.error is not None:
            _log.error("Block submission failed: %s", response.error.message)
            return False
        result = response.result
        if result is None:
            raise NodeClientError("Missing result in RPC response")
        if result.accepted:
            _log.debug("Block accepted by node!")
        else:
            _log.error("Block rejected: %s", result.message)
        return result.accepted

    async def get_mining_info(self) -> MiningInfo:
        """Fetch the node's mining summary."""
        response = await self._call("get_mining_info", None, MiningInfo, check_status=False)
        if response.error is not None:
            raise NodeClientError(f"RPC error: {response.error.message}")
        if response.result is None:
            raise NodeClientError("Missing result in RPC response")
        return response.result

    async def test_connection(self) -> None:
        """Raise NodeClientError unless the node answers a mining-info request."""
        _log.debug("Testing connection to node")
        await self.get_mining_info()

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None