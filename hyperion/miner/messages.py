"""JSON-RPC messages exchanged between the miner and the node."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from hyperion.core.errors import HyperionError
from hyperion.core.transaction import Transaction

JSONRPC_VERSION = "2.0"


def _object(obj: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ValueError(f"invalid type for {what}: expected a JSON object")
    return obj


def _require(obj: Mapping[str, Any], name: str) -> Any:
    if name not in obj:
        raise ValueError(f"missing field `{name}`")
    return obj[name]


def _uint(obj: Mapping[str, Any], name: str, bits: int) -> int:
    value = _require(obj, name)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 1 << bits:
        raise ValueError(f"invalid value for `{name}`: expected u{bits}")
    return value


def _i32(obj: Mapping[str, Any], name: str) -> int:
    value = _require(obj, name)
    if isinstance(value, bool) or not isinstance(value, int) or not -(1 << 31) <= value < 1 << 31:
        raise ValueError(f"invalid value for `{name}`: expected i32")
    return value


def _float(obj: Mapping[str, Any], name: str) -> float:
    value = _require(obj, name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"invalid type for `{name}`: expected a number")
    return float(value)


def _str(obj: Mapping[str, Any], name: str) -> str:
    value = _require(obj, name)
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{name}`: expected a string")
    return value


def _optional_str(obj: Mapping[str, Any], name: str) -> str | None:
    value = obj.get(name)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"invalid type for `{name}`: expected a string")
    return value


def _bool(obj: Mapping[str, Any], name: str) -> bool:
    value = _require(obj, name)
    if not isinstance(value, bool):
        raise ValueError(f"invalid type for `{name}`: expected a boolean")
    return value


@dataclass
class BlockTemplate:
    """Work offered by the node."""

    version: int
    previous_block_hash: str
    transactions: list[Transaction]
    difficulty_compact: int
    timestamp: int
    height: int
    merkle_root: str

    @classmethod
    def from_dict(cls, obj: Any) -> BlockTemplate:
        obj = _object(obj, "block template")
        raw_transactions = _require(obj, "transactions")
        if not isinstance(raw_transactions, list):
            raise ValueError("invalid type for `transactions`: expected a list")
        try:
            transactions = [Transaction.from_json(tx) for tx in raw_transactions]
        except HyperionError as exc:
            raise ValueError(f"invalid transaction: {exc}") from exc
        return cls(
            version=_uint(obj, "version", 32),
            previous_block_hash=_str(obj, "previous_block_hash"),
            transactions=transactions,
            difficulty_compact=_uint(obj, "difficulty_compact", 32),
            timestamp=_uint(obj, "timestamp", 32),
            height=_uint(obj, "height", 64),
            merkle_root=_str(obj, "merkle_root"),
        )


@dataclass
class MiningInfo:
    """Mining summary reported by the node."""

    blocks: int
    current_block_size: int
    current_block_tx: int
    difficulty: float
    network_hashps: float
    pooled_tx: int
    chain: str

    @classmethod
    def from_dict(cls, obj: Any) -> MiningInfo:
        obj = _object(obj, "mining info")
        return cls(
            blocks=_uint(obj, "blocks", 64),
            current_block_size=_uint(obj, "current_block_size", 64),
            current_block_tx=_uint(obj, "current_block_tx", 64),
            difficulty=_float(obj, "difficulty"),
            network_hashps=_float(obj, "network_hashps"),
            pooled_tx=_uint(obj, "pooled_tx", 64),
            chain=_str(obj, "chain"),
        )


@dataclass
class SubmitBlockRequest:
    """Parameters for submitting a mined block."""

    block_hex: str

    def to_dict(self) -> dict[str, Any]:
        return {"block_hex": self.block_hex}


@dataclass
class SubmitBlockResponse:
    """The node's verdict on a submitted block."""

    accepted: bool
    message: str | None = None

    @classmethod
    def from_dict(cls, obj: Any) -> SubmitBlockResponse:
        obj = _object(obj, "submit block response")
        return cls(accepted=_bool(obj, "accepted"), message=_optional_str(obj, "message"))


@dataclass
class GetWorkRequest:
    """Request for work on behalf of a payout address."""

    miner_address: str | None = None


@dataclass
class RpcError:
    """Error object carried in a JSON-RPC response."""

    code: int
    message: str

    @classmethod
    def from_dict(cls, obj: Any) -> RpcError:
        obj = _object(obj, "error")
        return cls(code=_i32(obj, "code"), message=_str(obj, "message"))


@dataclass
class RpcRequest:
    """Outgoing JSON-RPC request."""

    jsonrpc: str
    id: int
    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }


@dataclass
class RpcResponse:
    """Incoming JSON-RPC response."""

    jsonrpc: str
    id: int
    result: Any = None
    error: RpcError | None = None

    @classmethod
    def from_dict(cls, obj: Any, result_type: Any) -> RpcResponse:
        """Parse a response, decoding ``result`` with ``result_type``.

        ``result_type`` is a class with a ``from_dict`` constructor, or any
        callable that converts the raw JSON value.
        """
        obj = _object(obj, "response")
        parse: Callable[[Any], Any] = getattr(result_type, "from_dict", result_type)
        raw_result = obj.get("result")
        raw_error = obj.get("error")
        return cls(
            jsonrpc=_str(obj, "jsonrpc"),
            id=_uint(obj, "id", 32),
            result=None if raw_result is None else parse(raw_result),
            error=None if raw_error is None else RpcError.from_dict(raw_error),
        )