"""Block headers."""

from __future__ import annotations

from dataclasses import dataclass

from hyperion.core.crypto import HASH_SIZE, Hashable
from hyperion.core.encoding import Reader, encode_uint
from hyperion.core.errors import HeaderError
from hyperion.core.target import compact_to_target as _compact_to_target
from hyperion.core.target import hash_meets_target


def _checked(name: str, value: int, bits: int) -> int:
    if not 0 <= value < 1 << bits:
        raise ValueError(f"{name}={value} does not fit in {bits} bits")
    return value


@dataclass
class Header(Hashable):
    """Block header: metadata, proof-of-work nonce and chain links."""

    version: int
    time: int
    difficulty_compact: int
    nonce: int
    prev_hash: bytes
    merkle_root: bytes

    def __post_init__(self) -> None:
        self.prev_hash = bytes(self.prev_hash)
        self.merkle_root = bytes(self.merkle_root)
        for name, value in (("prev_hash", self.prev_hash), ("merkle_root", self.merkle_root)):
            if len(value) != HASH_SIZE:
                raise ValueError(f"{name} must be {HASH_SIZE} bytes, got {len(value)}")

    def serialize(self) -> bytes:
        return b"".join(
            (
                encode_uint(_checked("version", self.version, 32)),
                encode_uint(_checked("time", self.time, 32)),
                encode_uint(_checked("difficulty_compact", self.difficulty_compact, 32)),
                encode_uint(_checked("nonce", self.nonce, 64)),
                self.prev_hash,
                self.merkle_root,
            )
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Header:
        return cls.read_from(Reader(data))

    @classmethod
    def read_from(cls, reader: Reader) -> Header:
        version = reader.read_uint(32)
        time = reader.read_uint(32)
        difficulty_compact = reader.read_uint(32)
        nonce = reader.read_uint(64)
        prev_hash = reader.read_fixed(HASH_SIZE)
        merkle_root = reader.read_fixed(HASH_SIZE)
        return cls(version, time, difficulty_compact, nonce, prev_hash, merkle_root)

    def validate_pow(self) -> None:
        """Raise HeaderError unless the header hash meets its target."""
        if not hash_meets_target(self.double_sha256(), self.difficulty_compact):
            raise HeaderError(HeaderError.Kind.INVALID_POW)

    def compact_to_target(self) -> bytes:
        """Return the 32-byte target encoded by this header's difficulty."""
        return _compact_to_target(self.difficulty_compact)

    def __str__(self) -> str:
        return (
            f'Header(hash="{self.double_sha256().hex()}", '
            f"time={self.time}, nonce={self.nonce})"
        )