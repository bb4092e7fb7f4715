"""HTTP front end for the node's JSON-RPC interface."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from hyperion.node.handlers import (
    NodeState,
    get_block_count,
    get_block_template,
    get_blockchain_info,
    get_mining_info,
    submit_block,
)
from hyperion.node.rpc_types import RpcError, RpcRequest, SubmitBlockParams

_log = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

_STATE_KEY = web.AppKey("state", NodeState)


def _raw_params(params: Any) -> Any:
    return params


def _submit_params(params: Any) -> SubmitBlockParams | None:
    if params is None:
        return None
    try:
        return SubmitBlockParams.from_dict(params)
    except ValueError:
        return None


_Handler = Callable[[NodeState, Any], Awaitable[Any]]

_METHODS: dict[str, tuple[_Handler, Callable[[Any], Any]]] = {
    "get_block_template": (get_block_template, _raw_params),
    "submit_block": (submit_block, _submit_params),
    "get_mining_info": (get_mining_info, _raw_params),
    "get_blockchain_info": (get_blockchain_info, _raw_params),
    "get_block_count": (get_block_count, _raw_params),
}


def _response(request_id: Any, result: Any = None, error: RpcError | None = None) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result,
        "error": error.to_dict() if error is not None else None,
    }


def _to_json(result: Any) -> Any:
    to_dict = getattr(result, "to_dict", None)
    return to_dict() if callable(to_dict) else result


async def handle_rpc(state: NodeState, request: Any) -> dict[str, Any]:
    """Dispatch one decoded JSON-RPC request and return the response object."""
    _log.debug("RPC request: %s", request)
    try:
        rpc_request = RpcRequest.from_dict(request)
    except ValueError as exc:
        return _response(None, error=RpcError.invalid_params(str(exc)))

    entry = _METHODS.get(rpc_request.method)
    if entry is None:
        return _response(rpc_request.id, error=RpcError.method_not_found())

    handler, parse_params = entry
    try:
        result = await handler(state, parse_params(rpc_request.params))
    except RpcError as err:
        return _response(rpc_request.id, error=err)
    return _response(rpc_request.id, result=_to_json(result))


def _is_json_content(content_type: str) -> bool:
    return content_type == "application/json" or (
        content_type.startswith("application/") and content_type.endswith("+json")
    )


async def _rpc_endpoint(request: web.Request) -> web.Response:
    if not _is_json_content(request.content_type):
        return web.Response(status=415, text="Expected request with `Content-Type: application/json`")
    try:
        body = json.loads(await request.text())
    except json.JSONDecodeError as exc:
        return web.Response(status=400, text=f"Failed to parse the request body as JSON: {exc}")
    return web.json_response(await handle_rpc(request.app[_STATE_KEY], body))


@web.middleware
async def _permissive_cors(request: web.Request, handler):
    if request.method == "OPTIONS":
        response = web.Response()
        response.headers["Access-Control-Allow-Methods"] = request.headers.get(
            "Access-Control-Request-Method", "*"
        )
        response.headers["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", "*"
        )
    else:
        response = await handler(request)
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Expose-Headers"] = "*"
    return response


def create_app(state: NodeState) -> web.Application:
    """Build the web application serving JSON-RPC on ``/`` and ``/rpc``."""
    app = web.Application(middlewares=[_permissive_cors])
    app[_STATE_KEY] = state
    app.router.add_post("/", _rpc_endpoint)
    app.router.add_post("/rpc", _rpc_endpoint)
    return app


async def start_server(state: NodeState, port: int) -> None:
    """Serve the RPC interface on 127.0.0.1:``port`` until cancelled."""
    runner = web.AppRunner(create_app(state))
    await runner.setup()
    try:
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()