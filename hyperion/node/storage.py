"""Persisting the blockchain to disk."""

from __future__ import annotations

import os
from pathlib import Path

from hyperion.core.blockchain import Blockchain

DEFAULT_CHAIN_PATH = Path("blockchain.dat")


def save_chain(chain: Blockchain, path: str | os.PathLike[str] = DEFAULT_CHAIN_PATH) -> None:
    """Write the encoded chain to ``path``."""
    Path(path).write_bytes(chain.serialize())


def load_chain(path: str | os.PathLike[str] = DEFAULT_CHAIN_PATH) -> Blockchain:
    """Read a chain written by ``save_chain``.

    Raises OSError if the file cannot be read and a HyperionError if its
    contents are not a valid chain.
    """
    return Blockchain.from_bytes(Path(path).read_bytes())