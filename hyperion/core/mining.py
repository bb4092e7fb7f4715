"""High-level helper for producing new blocks."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from hyperion.core.block import Block
from hyperion.core.consensus import adjust_difficulty, mine_block
from hyperion.core.transaction import Transaction

if TYPE_CHECKING:
    from hyperion.core.blockchain import Blockchain


def mine_new_block(chain: Blockchain, transactions: Iterable[Transaction], timestamp: int) -> Block:
    """Create a block on top of ``chain`` at the current difficulty and mine it."""
    difficulty = adjust_difficulty(chain)
    block = chain.create_block_template(transactions, difficulty, timestamp)
    mine_block(block.header)
    return block