"""Transactions: opaque input and output payloads."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from hyperion.core.crypto import Hashable
from hyperion.core.encoding import Reader, encode_bytes_list
from hyperion.core.errors import TransactionError


@dataclass(frozen=True)
class Transaction(Hashable):
    """A transaction with at least one input and one output."""

    inputs: tuple[bytes, ...]
    outputs: tuple[bytes, ...]

    def __init__(self, inputs: Iterable[bytes], outputs: Iterable[bytes]) -> None:
        inputs = tuple(bytes(item) for item in inputs)
        outputs = tuple(bytes(item) for item in outputs)
        if not inputs:
            raise TransactionError(TransactionError.Kind.EMPTY_INPUTS)
        if not outputs:
            raise TransactionError(TransactionError.Kind.EMPTY_OUTPUTS)
        object.__setattr__(self, "inputs", inputs)
        object.__setattr__(self, "outputs", outputs)

    def serialize(self) -> bytes:
        return encode_bytes_list(self.inputs) + encode_bytes_list(self.outputs)

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        return cls.read_from(Reader(data))

    @classmethod
    def read_from(cls, reader: Reader) -> Transaction:
        inputs = reader.read_bytes_list()
        outputs = reader.read_bytes_list()
        return cls(inputs, outputs)

    def to_json(self) -> dict[str, list[list[int]]]:
        """Return a JSON-ready form with payloads as lists of byte values."""
        return {
            "inputs": [list(item) for item in self.inputs],
            "outputs": [list(item) for item in self.outputs],
        }

    @classmethod
    def from_json(cls, obj: Any) -> Transaction:
        try:
            return cls(
                (bytes(item) for item in obj["inputs"]),
                (bytes(item) for item in obj["outputs"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed transaction: {exc}") from exc

    def __str__(self) -> str:
        return (
            f"Tx(inputs={len(self.inputs)}, output={len(self.outputs)}, "
            f'hash="{self.double_sha256().hex()}")'
        )