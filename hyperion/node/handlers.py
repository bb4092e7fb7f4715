"""JSON-RPC method implementations."""

from __future__ import annotations

import asyncio
import logging
import os
import string
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hyperion.core.block import Block, compute_merkle_root
from hyperion.core.blockchain import Blockchain
from hyperion.core.consensus import adjust_difficulty
from hyperion.core.errors import BlockchainError, HyperionError
from hyperion.node import storage
from hyperion.node.clock import current_timestamp
from hyperion.node.mempool import Mempool
from hyperion.node.rpc_types import (
    BlockTemplate,
    ChainInfo,
    MiningInfo,
    RpcError,
    SubmitBlockParams,
    SubmitBlockResult,
)

_log = logging.getLogger(__name__)

CHAIN_NAME = "hyperion"
TEMPLATE_TX_LIMIT = 100


@dataclass
class NodeState:
    """Shared state behind the RPC handlers."""

    chain: Blockchain
    mempool: Mempool
    chain_path: str | os.PathLike[str] = storage.DEFAULT_CHAIN_PATH
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


def _decode_hex(text: str) -> bytes:
    if len(text) % 2:
        raise ValueError("Odd number of digits")
    for position, char in enumerate(text):
        if char not in string.hexdigits:
            raise ValueError(f"Invalid character {char!r} at position {position}")
    return bytes.fromhex(text)


async def get_block_template(state: NodeState, params: Any = None) -> BlockTemplate:
    """Build a block template from the chain tip and the oldest pooled transactions."""
    async with state.lock:
        transactions = state.mempool.get_next_transactions(TEMPLATE_TX_LIMIT) or []
        latest = state.chain.latest_block()
        template = BlockTemplate(
            version=1,
            previous_block_hash=latest.double_sha256().hex(),
            transactions=transactions,
            difficulty_compact=adjust_difficulty(state.chain),
            timestamp=current_timestamp(),
            height=len(state.chain),
            merkle_root=compute_merkle_root(transactions).hex(),
        )
    _log.debug(
        "Providing block template (height=%d, difficulty=%d, tx_count=%d)",
        template.height,
        template.difficulty_compact,
        len(template.transactions),
    )
    return template


async def submit_block(state: NodeState, params: SubmitBlockParams | None) -> SubmitBlockResult:
    """Decode a submitted block and try to append it to the chain."""
    if params is None:
        raise RpcError.invalid_params("Missing block data")
    try:
        block_bytes = _decode_hex(params.block_hex)
    except ValueError as exc:
        raise RpcError.invalid_params(f"Invalid hex: {exc}") from exc
    try:
        block = Block.from_bytes(block_bytes)
    except (HyperionError, ValueError) as exc:
        raise RpcError.invalid_params(f"Invalid block: {exc}") from exc

    async with state.lock:
        try:
            state.chain.add_block(block, skip_pow=False)
        except BlockchainError as exc:
            _log.warning("Block rejected: %s", exc.kind.value)
            return SubmitBlockResult(accepted=False, message=exc.kind.value)

        _log.info(
            "Block accepted (height=%d, tx_count=%d)", len(state.chain), len(block.transactions)
        )
        for tx in block.transactions:
            state.mempool.remove_tx(tx)
        try:
            storage.save_chain(state.chain, Path(state.chain_path))
        except OSError as exc:
            _log.error("Failed to save blockchain to disk: %s", exc)

    return SubmitBlockResult(accepted=True, message=None)


async def get_mining_info(state: NodeState, params: Any = None) -> MiningInfo:
    async with state.lock:
        return MiningInfo(
            blocks=len(state.chain),
            current_block_size=0,
            current_block_tx=0,
            difficulty=float(adjust_difficulty(state.chain)),
            network_hashps=0.0,
            pooled_tx=len(state.mempool),
            chain=CHAIN_NAME,
        )


async def get_blockchain_info(state: NodeState, params: Any = None) -> ChainInfo:
    async with state.lock:
        latest = state.chain.latest_block()
        return ChainInfo(
            chain=CHAIN_NAME,
            blocks=len(state.chain),
            headers=len(state.chain),
            best_blockhash=latest.double_sha256().hex(),
            difficulty=float(adjust_difficulty(state.chain)),
            median_time=latest.header.time,
        )


async def get_block_count(state: NodeState, params: Any = None) -> int:
    """Return the height of the tip, i.e. the number of blocks minus one."""
    async with state.lock:
        return len(state.chain) - 1