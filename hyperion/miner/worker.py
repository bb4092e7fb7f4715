"""Mining workers that search nonce ranges for a valid block."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field, replace

from hyperion.core.block import Block
from hyperion.core.consensus import validate_pow
from hyperion.core.header import Header
from hyperion.core.transaction import Transaction

_log = logging.getLogger(__name__)

BATCH_SIZE = 10_000
"""Nonces tried between checks for cancellation."""

OFFLINE_POLL_SECONDS = 3.0
IDLE_POLL_SECONDS = 0.1
_NONCE_LIMIT = 1 << 64


@dataclass
class WorkItem:
    """A header to mine and the nonce range assigned to one worker."""

    header: Header
    nonce_start: int
    nonce_range: int
    transactions: list[Transaction]
    work_id: int
    cancel: threading.Event = field(default_factory=threading.Event)
    solution_found: threading.Event = field(default_factory=threading.Event)


@dataclass
class MiningResult:
    """A solved block and who found it."""

    block: Block
    nonce: int
    worker_id: int


@dataclass(eq=False)
class MiningWorker:
    """Searches nonces for work items taken from a queue."""

    id: int
    node_connected: threading.Event
    running: threading.Event = field(default_factory=threading.Event)
    hashes_computed: int = 0
    current_work_id: int = 0

    async def start(
        self,
        work_queue: asyncio.Queue[WorkItem | None],
        result_queue: asyncio.Queue[MiningResult],
    ) -> None:
        """Mine work items until stopped or until ``None`` is taken from the queue."""
        self.running.set()
        _log.debug("Mining worker %d started", self.id)
        while self.running.is_set():
            try:
                work = await asyncio.wait_for(work_queue.get(), IDLE_POLL_SECONDS)
            except TimeoutError:
                continue
            if work is None:
                break
            self.current_work_id = work.work_id
            result = await self.mine_work(work)
            if result is not None:
                await result_queue.put(result)
        _log.debug("Mining worker %d stopped", self.id)

    async def mine_work(self, work: WorkItem) -> MiningResult | None:
        """Try every nonce in the work's range; return the first solution, if any.

        The search is abandoned when the worker stops, the work is cancelled,
        another worker has found a solution or newer work has arrived.
        """
        header = replace(work.header)
        start_nonce = work.nonce_start
        end_nonce = min(start_nonce + work.nonce_range, _NONCE_LIMIT)
        _log.debug("Worker %d mining nonce range %d to %d", self.id, start_nonce, end_nonce)

        for batch_start in range(start_nonce, end_nonce, BATCH_SIZE):
            while not self.node_connected.is_set():
                _log.debug("Worker %d paused (node offline)", self.id)
                await asyncio.sleep(OFFLINE_POLL_SECONDS)

            if (
                not self.running.is_set()
                or work.cancel.is_set()
                or work.solution_found.is_set()
            ):
                _log.debug("Worker %d work cancelled or stopped", self.id)
                return None

            if self.current_work_id != work.work_id:
                _log.debug("Worker %d abandoning stale work ID %d", self.id, work.work_id)
                return None

            for nonce in range(batch_start, min(batch_start + BATCH_SIZE, end_nonce)):
                header.nonce = nonce
                if validate_pow(header):
                    if work.cancel.is_set():
                        _log.debug("Work cancelled just before solution submission")
                        return None
                    _log.debug("Worker %d found solution! Nonce: %d", self.id, nonce)
                    return MiningResult(
                        block=Block(header, list(work.transactions)),
                        nonce=nonce,
                        worker_id=self.id,
                    )
                self.hashes_computed += 1

            if work.cancel.is_set():
                _log.debug("Worker %d work cancelled mid-batch", self.id)
                return None

            await asyncio.sleep(0)

        return None

    def stop(self) -> None:
        """Ask the worker to stop after its current batch."""
        self.running.clear()

    def restart(self) -> None:
        """Briefly clear and then set the running flag."""
        self.running.clear()
        time.sleep(0.01)
        self.running.set()