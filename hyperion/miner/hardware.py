"""Host CPU detection for choosing the number of mining workers."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class SystemInfo:
    """CPU facts relevant to mining."""

    cpu_cores: int
    optimal_threads: int


def _cpu_count() -> int:
    return os.cpu_count() or 1


def detect_optimal_threads() -> int:
    """Return the CPU count, leaving one core free when there are more than two."""
    cpu_count = _cpu_count()
    return cpu_count - 1 if cpu_count > 2 else cpu_count


def get_system_info() -> SystemInfo:
    """Return the CPU count and the suggested number of mining threads."""
    return SystemInfo(cpu_cores=_cpu_count(), optimal_threads=detect_optimal_threads())