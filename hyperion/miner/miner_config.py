"""Miner configuration file handling."""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_NODE_URL = "http://127.0.0.1:45154"

_STRING_FIELDS = frozenset({"node_url", "log_level"})
_U64_LIMIT = 1 << 64


def _default_threads() -> int:
    return os.cpu_count() or 1


@dataclass
class MiningConfig:
    """Settings for the miner, stored as a TOML file."""

    node_url: str = DEFAULT_NODE_URL
    threads: int = field(default_factory=_default_threads)
    reconnect_delay: int = 5
    work_update_interval: int = 1000  # milliseconds
    stats_interval: int = 30  # seconds
    log_level: str = "info"

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> MiningConfig:
        """Read the configuration at ``path``.

        If the file does not exist, the defaults are written there and returned.
        Raises ValueError if the file is not valid TOML or lacks a setting.
        """
        path = Path(path)
        if path.exists():
            with path.open("rb") as handle:
                data = tomllib.load(handle)
            return cls._from_mapping(data)
        default = cls()
        path.write_text(tomli_w.dumps(asdict(default)), encoding="utf-8")
        return default

    @classmethod
    def _from_mapping(cls, data: dict[str, Any]) -> MiningConfig:
        values: dict[str, Any] = {}
        for spec in fields(cls):
            if spec.name not in data:
                raise ValueError(f"missing field `{spec.name}`")
            value = data[spec.name]
            if spec.name in _STRING_FIELDS:
                if not isinstance(value, str):
                    raise ValueError(f"invalid type for `{spec.name}`: expected a string")
            elif (
                isinstance(value, bool)
                or not isinstance(value, int)
                or not 0 <= value < _U64_LIMIT
            ):
                raise ValueError(
                    f"invalid value for `{spec.name}`: expected a non-negative integer"
                )
            values[spec.name] = value
        return cls(**values)