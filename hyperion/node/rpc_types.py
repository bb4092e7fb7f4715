"""JSON-RPC 2.0 message types served by the node."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from hyperion.core.transaction import Transaction


class RpcError(Exception):
    """A JSON-RPC error object, raised by handlers and sent to the caller."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    @classmethod
    def method_not_found(cls) -> RpcError:
        return cls(-32601, "Method not found")

    @classmethod
    def invalid_params(cls, msg: str) -> RpcError:
        return cls(-32602, f"Invalid params: {msg}")

    @classmethod
    def internal_error(cls, msg: str) -> RpcError:
        return cls(-32603, f"Internal error: {msg}")

    @classmethod
    def custom(cls, code: int, msg: str) -> RpcError:
        return cls(code, msg)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": self.data}


def _require_str(obj: dict[str, Any], name: str) -> str:
    if name not in obj:
        raise ValueError(f"missing field `{name}`")
    value = obj[name]
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{name}`: expected a string")
    return value


@dataclass
class RpcRequest:
    """An incoming JSON-RPC request."""

    jsonrpc: str
    id: Any
    method: str
    params: Any = None

    @classmethod
    def from_dict(cls, obj: Any) -> RpcRequest:
        """Parse a decoded JSON value; raises ValueError when it is malformed."""
        if not isinstance(obj, dict):
            raise ValueError("invalid type: expected a JSON object")
        jsonrpc = _require_str(obj, "jsonrpc")
        if "id" not in obj:
            raise ValueError("missing field `id`")
        method = _require_str(obj, "method")
        return cls(jsonrpc, obj["id"], method, obj.get("params"))


@dataclass
class BlockTemplate:
    """Work handed to miners."""

    version: int
    previous_block_hash: str
    transactions: list[Transaction]
    difficulty_compact: int
    timestamp: int
    height: int
    merkle_root: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "previous_block_hash": self.previous_block_hash,
            "transactions": [tx.to_json() for tx in self.transactions],
            "difficulty_compact": self.difficulty_compact,
            "timestamp": self.timestamp,
            "height": self.height,
            "merkle_root": self.merkle_root,
        }


@dataclass
class SubmitBlockParams:
    """Parameters of a block submission."""

    block_hex: str

    @classmethod
    def from_dict(cls, obj: Any) -> SubmitBlockParams:
        if not isinstance(obj, dict):
            raise ValueError("invalid type: expected a JSON object")
        return cls(_require_str(obj, "block_hex"))


@dataclass
class SubmitBlockResult:
    """Outcome of a block submission."""

    accepted: bool
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MiningInfo:
    """Summary of mining state."""

    blocks: int
    current_block_size: int
    current_block_tx: int
    difficulty: float
    network_hashps: float
    pooled_tx: int
    chain: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ChainInfo:
    """Summary of chain state."""

    chain: str
    blocks: int
    headers: int
    best_blockhash: str
    difficulty: float
    median_time: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)