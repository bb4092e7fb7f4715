"""Peer-to-peer listener that accepts pushed blocks."""

from __future__ import annotations

import asyncio

from hyperion.core.block import Block

READ_LIMIT = 4096


def _split_address(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid listen address {addr!r}; expected host:port")
    return host, int(port)


async def handle_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> Block:
    """Read one block from a peer connection, report its hash and return it."""
    try:
        data = await reader.read(READ_LIMIT)
        block = Block.from_bytes(data)
        print(f"Received block: {list(block.double_sha256())}")
        return block
    finally:
        writer.close()
        await writer.wait_closed()


async def start_network_listener(addr: str) -> None:
    """Accept peer connections on ``addr`` (host:port) until cancelled."""
    host, port = _split_address(addr)
    server = await asyncio.start_server(handle_client, host, port)
    async with server:
        await server.serve_forever()