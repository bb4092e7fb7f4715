"""Proof-of-work rules: validation, difficulty retargeting and mining."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from hyperion.core.block import Block, compute_merkle_root
from hyperion.core.crypto import HASH_SIZE
from hyperion.core.header import Header
from hyperion.core.target import hash_meets_target, target_to_compact
from hyperion.core.transaction import Transaction

if TYPE_CHECKING:
    from hyperion.core.blockchain import Blockchain

TARGET_BLOCK_TIME = 600
"""Target time between blocks, in seconds."""

ADJUSTMENT_INTERVAL = 3
"""Number of blocks between difficulty adjustments."""

GENESIS_DIFFICULTY = 0x207FFFFF

_NONCE_MODULUS = 1 << 64
_MAX_TARGET = (1 << (HASH_SIZE * 8)) - 1


def validate_pow(header: Header) -> bool:
    """Return whether the header's hash is at or below its target."""
    return hash_meets_target(header.double_sha256(), header.difficulty_compact)


def adjust_difficulty(chain: Blockchain) -> int:
    """Return the compact difficulty the next block on ``chain`` must meet.

    The difficulty is retargeted only when the chain length is a non-zero
    multiple of the adjustment interval; otherwise the latest block's
    difficulty carries over.
    """
    length = len(chain)
    last_block = chain.latest_block()
    if length < ADJUSTMENT_INTERVAL or length % ADJUSTMENT_INTERVAL != 0:
        return last_block.header.difficulty_compact

    first_block = chain.get_block_by_height(length - ADJUSTMENT_INTERVAL)
    actual_time = max(last_block.header.time - first_block.header.time, 0)
    expected_time = TARGET_BLOCK_TIME * ADJUSTMENT_INTERVAL

    target = int.from_bytes(last_block.header.compact_to_target(), "big")
    target *= max(actual_time, 1)
    target //= max(expected_time, 1)

    if target.bit_length() > HASH_SIZE * 8:
        target = _MAX_TARGET

    return target_to_compact(target)


def mine_block(header: Header) -> Header:
    """Search nonces from zero until the header meets its target.

    The header is updated in place with the winning nonce, and a copy of it
    is returned.
    """
    nonce = 0
    while True:
        header.nonce = nonce
        if validate_pow(header):
            return replace(header)
        nonce = (nonce + 1) % _NONCE_MODULUS


def create_genesis_block() -> Block:
    """Build and mine the genesis block."""
    tx = Transaction([b"genesis"], [b"genesis_out"])
    header = Header(
        version=1,
        time=0,
        difficulty_compact=GENESIS_DIFFICULTY,
        nonce=0,
        prev_hash=bytes(HASH_SIZE),
        merkle_root=compute_merkle_root([tx]),
    )
    return Block(mine_block(header), [tx])