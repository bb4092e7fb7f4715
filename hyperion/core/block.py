"""Blocks and Merkle roots."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import ClassVar

from hyperion.core.crypto import HASH_SIZE, Hashable, double_sha256
from hyperion.core.encoding import Reader, encode_uint
from hyperion.core.errors import BlockError
from hyperion.core.header import Header
from hyperion.core.transaction import Transaction


def compute_merkle_root(transactions: Sequence[Transaction]) -> bytes:
    """Return the Merkle root of the transactions; all zeros when empty."""
    hashes = [tx.double_sha256() for tx in transactions]
    if not hashes:
        return bytes(HASH_SIZE)
    while len(hashes) > 1:
        if len(hashes) % 2:
            hashes.append(hashes[-1])
        hashes = [double_sha256(left + right) for left, right in zip(hashes[::2], hashes[1::2])]
    return hashes[0]


@dataclass
class Block(Hashable):
    """A header together with its transactions."""

    MERKLE_PAIR_SIZE: ClassVar[int] = HASH_SIZE * 2

    header: Header
    transactions: list[Transaction] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.transactions = list(self.transactions)

    @classmethod
    def with_merkle(cls, header: Header, transactions: Iterable[Transaction]) -> Block:
        """Build a block whose header carries the transactions' Merkle root."""
        transactions = list(transactions)
        return cls(replace(header, merkle_root=compute_merkle_root(transactions)), transactions)

    def validate_merkle_root(self) -> None:
        """Raise BlockError if the header's Merkle root does not match."""
        if compute_merkle_root(self.transactions) != self.header.merkle_root:
            raise BlockError(BlockError.Kind.INVALID_MERKLE_ROOT)

    def serialize(self) -> bytes:
        return (
            self.header.serialize()
            + encode_uint(len(self.transactions))
            + b"".join(tx.serialize() for tx in self.transactions)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Block:
        return cls.read_from(Reader(data))

    @classmethod
    def read_from(cls, reader: Reader) -> Block:
        header = Header.read_from(reader)
        count = reader.read_uint(64)
        return cls(header, [Transaction.read_from(reader) for _ in range(count)])

    def __str__(self) -> str:
        return (
            f'Block(hash="{self.double_sha256().hex()}", '
            f"txs={len(self.transactions)}, header={self.header})"
        )