"""Wall-clock helpers for the node."""

from __future__ import annotations

import time

_U32_MASK = 0xFFFFFFFF


def current_timestamp() -> int:
    """Return the current Unix time in whole seconds, truncated to 32 bits."""
    return int(time.time()) & _U32_MASK