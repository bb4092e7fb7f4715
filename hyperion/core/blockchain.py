"""The chain of blocks."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

from hyperion.core.block import Block, compute_merkle_root
from hyperion.core.consensus import create_genesis_block
from hyperion.core.encoding import Reader, encode_uint
from hyperion.core.errors import BlockchainError, BlockError, HeaderError
from hyperion.core.header import Header
from hyperion.core.transaction import Transaction


class Blockchain:
    """An ordered sequence of blocks, genesis first."""

    def __init__(self, blocks: Iterable[Block] = ()) -> None:
        self.blocks: deque[Block] = deque(blocks)

    @classmethod
    def from_genesis(cls, genesis_block: Block) -> Blockchain:
        """Start a chain from the given genesis block."""
        return cls([genesis_block])

    @classmethod
    def with_genesis(cls) -> Blockchain:
        """Start a chain from a freshly mined genesis block."""
        return cls.from_genesis(create_genesis_block())

    def latest_block(self) -> Block:
        """Return the tip of the chain."""
        if not self.blocks:
            raise IndexError("blockchain has no blocks")
        return self.blocks[-1]

    def add_block(self, block: Block, skip_pow: bool = False) -> None:
        """Append a block after checking its link, Merkle root and proof of work."""
        if block.header.prev_hash != self.latest_block().double_sha256():
            raise BlockchainError(BlockchainError.Kind.INVALID_PREVIOUS_HASH)
        try:
            block.validate_merkle_root()
        except BlockError as exc:
            raise BlockchainError(BlockchainError.Kind.INVALID_MERKLE_ROOT) from exc
        if not skip_pow:
            try:
                block.header.validate_pow()
            except HeaderError as exc:
                raise BlockchainError(BlockchainError.Kind.INVALID_MERKLE_ROOT) from exc
        self.blocks.append(block)

    def validate(self) -> bool:
        """Check links, Merkle roots and proof of work for every block."""
        return self.validate_with_options(False)

    def validate_with_options(self, skip_pow: bool) -> bool:
        """Check every block, optionally skipping proof of work."""
        previous: Block | None = None
        for block in self.blocks:
            if previous is not None and block.header.prev_hash != previous.double_sha256():
                return False
            try:
                block.validate_merkle_root()
                if not skip_pow:
                    block.header.validate_pow()
            except (BlockError, HeaderError):
                return False
            previous = block
        return True

    def create_block_template(
        self,
        transactions: Iterable[Transaction],
        difficulty_compact: int,
        timestamp: int,
    ) -> Block:
        """Build an unmined block on top of the current tip."""
        transactions = list(transactions)
        header = Header(
            version=1,
            time=timestamp,
            difficulty_compact=difficulty_compact,
            nonce=0,
            prev_hash=self.latest_block().double_sha256(),
            merkle_root=compute_merkle_root(transactions),
        )
        return Block(header, transactions)

    def mine_new_block(self, transactions: Iterable[Transaction], timestamp: int) -> Block:
        """Build and mine a block on top of the current tip."""
        from hyperion.core.mining import mine_new_block

        return mine_new_block(self, transactions, timestamp)

    def get_block_by_height(self, height: int) -> Block | None:
        """Return the block at ``height``, or None if there is none."""
        if 0 <= height < len(self.blocks):
            return self.blocks[height]
        return None

    def find_block(self, block_hash: bytes) -> Block | None:
        """Return the block with the given hash, or None."""
        block_hash = bytes(block_hash)
        return next((b for b in self.blocks if b.double_sha256() == block_hash), None)

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __reversed__(self) -> Iterator[Block]:
        return reversed(self.blocks)

    def serialize(self) -> bytes:
        """Return the binary encoding of the whole chain."""
        return encode_uint(len(self.blocks)) + b"".join(b.serialize() for b in self.blocks)

    @classmethod
    def from_bytes(cls, data: bytes) -> Blockchain:
        """Decode a chain produced by ``serialize``."""
        reader = Reader(data)
        count = reader.read_uint(64)
        return cls(Block.read_from(reader) for _ in range(count))