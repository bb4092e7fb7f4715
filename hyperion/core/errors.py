"""Exception types raised by the core blockchain model."""

from __future__ import annotations

from enum import Enum


class HyperionError(Exception):
    """Base class for errors raised by the hyperion package."""


class TransactionError(HyperionError):
    """A transaction could not be built."""

    class Kind(Enum):
        EMPTY_INPUTS = "EmptyInputs"
        EMPTY_OUTPUTS = "EmptyOutputs"

    def __init__(self, kind: TransactionError.Kind) -> None:
        super().__init__(kind.value)
        self.kind = kind


class BlockError(HyperionError):
    """A block failed validation."""

    class Kind(Enum):
        INVALID_MERKLE_ROOT = "InvalidMerkleRoot"
        EMPTY_TRANSACTIONS = "EmptyTransactions"

    def __init__(self, kind: BlockError.Kind) -> None:
        super().__init__(kind.value)
        self.kind = kind


class HeaderError(HyperionError):
    """A block header failed validation."""

    class Kind(Enum):
        INVALID_POW = "InvalidPoW"

    def __init__(self, kind: HeaderError.Kind) -> None:
        super().__init__(kind.value)
        self.kind = kind


class BlockchainError(HyperionError):
    """A block could not be appended to the chain."""

    class Kind(Enum):
        INVALID_PREVIOUS_HASH = "InvalidPreviousHash"
        INVALID_MERKLE_ROOT = "InvalidMerkleRoot"
        INVALID_POW = "InvalidPoW"

    def __init__(self, kind: BlockchainError.Kind) -> None:
        super().__init__(kind.value)
        self.kind = kind