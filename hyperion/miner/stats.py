"""Hash-rate bookkeeping for the miner."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

HASHRATE_UNITS = ("H/s", "KH/s", "MH/s", "GH/s", "TH/s", "PH/s")


@dataclass(eq=False)
class MiningStats:
    """Counters shared between the miner and its statistics reporter."""

    clock: Callable[[], float] = time.monotonic
    blocks_found: int = 0
    start_time: float = field(init=False)
    last_hash_count: int = field(init=False, default=0)
    last_stats_time: float = field(init=False)
    _lock: threading.Lock = field(init=False, repr=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        now = self.clock()
        self.start_time = now
        self.last_stats_time = now

    def calculate_hashrate(self, total_hashes: int) -> float:
        """Return hashes per second since the previous call, given a running total."""
        with self._lock:
            now = self.clock()
            duration = now - self.last_stats_time
            last_hashes = self.last_hash_count
            self.last_hash_count = total_hashes
            hash_diff = max(total_hashes - last_hashes, 0)
            self.last_stats_time = now
        if duration > 0.0:
            return hash_diff / duration
        return 0.0

    def format_hashrate(self, h: float) -> str:
        """Render a hash rate with two decimals and a scaled unit."""
        value = h
        unit = HASHRATE_UNITS[0]
        for unit in HASHRATE_UNITS:
            if value < 1000.0:
                break
            value /= 1000.0
        return f"{value:.2f} {unit}"