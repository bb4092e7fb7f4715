"""Pool of transactions waiting to be included in a block."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from hyperion.core.encoding import Reader, encode_uint
from hyperion.core.transaction import Transaction

DEFAULT_MEMPOOL_PATH = Path("mempool.dat")


@dataclass
class Mempool:
    """Pending transactions in arrival order."""

    txs: list[Transaction] = field(default_factory=list)
    path: Path = DEFAULT_MEMPOOL_PATH

    def add_tx(self, tx: Transaction) -> None:
        """Append a transaction to the pool."""
        self.txs.append(tx)

    def remove_tx(self, tx_to_remove: Transaction) -> None:
        """Drop every pooled transaction with the same hash as ``tx_to_remove``."""
        target = tx_to_remove.double_sha256()
        self.txs = [tx for tx in self.txs if tx.double_sha256() != target]

    def is_empty(self) -> bool:
        return not self.txs

    def get_next_transactions(self, n: int) -> list[Transaction] | None:
        """Remove and return up to ``n`` of the oldest transactions, or None if empty."""
        if n < 0:
            raise ValueError("n must be non-negative")
        if not self.txs:
            return None
        taken = self.txs[:n]
        del self.txs[:n]
        return taken

    def __len__(self) -> int:
        return len(self.txs)

    def save(self) -> None:
        """Write the pooled transactions to ``self.path``."""
        data = encode_uint(len(self.txs)) + b"".join(tx.serialize() for tx in self.txs)
        Path(self.path).write_bytes(data)

    @classmethod
    def load(cls) -> Mempool:
        """Read the pool from the default path, or start empty if there is no file."""
        path = DEFAULT_MEMPOOL_PATH
        if not path.exists():
            return cls()
        reader = Reader(path.read_bytes())
        count = reader.read_uint(64)
        return cls([Transaction.read_from(reader) for _ in range(count)], path)