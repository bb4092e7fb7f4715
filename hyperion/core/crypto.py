"""Hashing primitives."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod

HASH_SIZE = 32


def double_sha256(data: bytes) -> bytes:
    """Return SHA-256 applied twice to ``data``."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


class Hashable(ABC):
    """Mixin for objects identified by the double SHA-256 of their encoding."""

    @abstractmethod
    def serialize(self) -> bytes:
        """Return the canonical binary encoding."""

    def double_sha256(self) -> bytes:
        """Return the double SHA-256 of the serialized form."""
        return double_sha256(self.serialize())