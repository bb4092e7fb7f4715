"""Solo mining: fetch work from one node, split it across workers, submit solutions."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import replace

from hyperion.core.crypto import HASH_SIZE
from hyperion.core.header import Header
from hyperion.miner.miner_config import MiningConfig
from hyperion.miner.node_client import NodeClient, NodeClientError
from hyperion.miner.stats import MiningStats
from hyperion.miner.worker import MiningResult, MiningWorker, WorkItem

_log = logging.getLogger(__name__)

HEALTH_CHECK_SECONDS = 5.0
RESULT_POLL_SECONDS = 0.1
RESTART_DELAY_SECONDS = 0.01
WORKER_SHUTDOWN_SECONDS = 1.0
QUEUE_SIZE = 10
_NONCE_MAX = (1 << 64) - 1


def _decode_hash(text: str, what: str) -> bytes:
    raw = bytes.fromhex(text)
    if len(raw) != HASH_SIZE:
        raise ValueError(f"Invalid {what} length")
    return raw


class SoloMiner:
    """Mines on templates from a single node with a pool of workers."""

    def __init__(
        self,
        config: MiningConfig,
        node_client: NodeClient,
        node_connected: threading.Event,
        workers: list[MiningWorker],
    ) -> None:
        self.config = config
        self.node_client = node_client
        self.node_connected = node_connected
        self.workers = workers
        self.stats = MiningStats()
        self._running = False
        self._work_counter = 0
        self._cancel: threading.Event | None = None
        self._solution_found = threading.Event()

    @classmethod
    async def create(cls, config: MiningConfig) -> SoloMiner:
        """Build a miner for ``config``, probing the node once.

        An unreachable node is not an error: the miner starts paused.
        """
        if config.threads < 1:
            raise ValueError("at least one mining thread is required")
        if config.stats_interval < 1:
            raise ValueError("stats_interval must be at least one second")
        node_client = NodeClient(config.node_url)
        node_connected = threading.Event()
        try:
            await node_client.test_connection()
        except NodeClientError:
            pass
        else:
            node_connected.set()
        workers = [MiningWorker(i, node_connected) for i in range(config.threads)]
        return cls(config, node_client, node_connected, workers)

    async def __aenter__(self) -> SoloMiner:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.node_client.close()

    async def start_mining(self) -> None:
        """Mine until ``stop`` is called.

        Raises NodeClientError or ValueError if the first template cannot be
        fetched or decoded.
        """
        self._running = True
        _log.info("Starting solo mining with %d threads", self.config.threads)

        result_queue: asyncio.Queue[MiningResult] = asyncio.Queue(QUEUE_SIZE)
        work_queues: list[asyncio.Queue[WorkItem | None]] = [
            asyncio.Queue(QUEUE_SIZE) for _ in self.workers
        ]
        background = [
            asyncio.create_task(self._watch_node()),
            asyncio.create_task(self._report_periodically()),
        ]
        worker_tasks = [
            asyncio.create_task(worker.start(queue, result_queue))
            for worker, queue in zip(self.workers, work_queues)
        ]

        try:
            await self._distribute_work(work_queues)
            while self._running:
                try:
                    result = await asyncio.wait_for(result_queue.get(), RESULT_POLL_SECONDS)
                except TimeoutError:
                    continue
                await self._handle_result(result, work_queues)
        finally:
            _log.info("Stopping workers...")
            await self._shutdown_workers(worker_tasks, work_queues)
            for task in background:
                task.cancel()
            await asyncio.gather(*background, return_exceptions=True)

        _log.info("Solo miner stopped")

    async def stop(self) -> None:
        """Ask the mining loop to finish."""
        _log.info("Stopping miner...")
        self._running = False

    async def _handle_result(
        self, result: MiningResult, work_queues: list[asyncio.Queue[WorkItem | None]]
    ) -> None:
        _log.info("Block found by worker %d!", result.worker_id)
        self._solution_found.set()
        if self._cancel is not None:
            self._cancel.set()
            _log.debug("Cancelled all current work")

        try:
            await self.node_client.submit_block(result.block)
        except NodeClientError as exc:
            _log.error("Failed to submit block: %s", exc)
        else:
            self.stats.blocks_found += 1
            _log.debug("Block submitted successfully!")

        await asyncio.sleep(RESTART_DELAY_SECONDS)

        _log.debug("Restarting mining with fresh work...")
        try:
            await self._distribute_work(work_queues)
        except (NodeClientError, ValueError) as exc:
            _log.error("Failed to restart workers with new work: %s", exc)
        else:
            _log.debug("All workers restarted with new work")

    async def _distribute_work(self, work_queues: list[asyncio.Queue[WorkItem | None]]) -> None:
        self._solution_found.clear()
        if self._cancel is not None:
            self._cancel.set()
        cancel = threading.Event()
        self._cancel = cancel

        template = await self.node_client.get_block_template()
        work_id = self._work_counter
        self._work_counter += 1

        header = Header(
            version=template.version,
            time=template.timestamp,
            difficulty_compact=template.difficulty_compact,
            nonce=0,
            prev_hash=_decode_hash(template.previous_block_hash, "previous block hash"),
            merkle_root=_decode_hash(template.merkle_root, "merkle root"),
        )

        per_worker = _NONCE_MAX // len(work_queues)
        for index, queue in enumerate(work_queues):
            await queue.put(
                WorkItem(
                    header=replace(header),
                    nonce_start=index * per_worker,
                    nonce_range=per_worker,
                    transactions=list(template.transactions),
                    work_id=work_id,
                    cancel=cancel,
                    solution_found=self._solution_found,
                )
            )
        _log.debug("Distributed work ID %d to %d workers", work_id, len(work_queues))

    async def _watch_node(self) -> None:
        while True:
            try:
                await self.node_client.test_connection()
            except NodeClientError:
                _log.warning("Mining paused: Node offline")
                self.node_connected.clear()
            else:
                self.node_connected.set()
            await asyncio.sleep(HEALTH_CHECK_SECONDS)

    async def _report_periodically(self) -> None:
        while True:
            if self.node_connected.is_set():
                self._report_stats()
            else:
                _log.debug("Stats paused: node offline")
            await asyncio.sleep(self.config.stats_interval)

    def _report_stats(self) -> None:
        total_hashes = sum(worker.hashes_computed for worker in self.workers)
        hashrate = self.stats.format_hashrate(self.stats.calculate_hashrate(total_hashes))
        uptime = self.stats.clock() - self.stats.start_time
        _log.info(
            "Hashrate: %s, Blocks: %d, Uptime: %.2f s",
            hashrate,
            self.stats.blocks_found,
            uptime,
        )

    async def _shutdown_workers(
        self,
        worker_tasks: list[asyncio.Task[None]],
        work_queues: list[asyncio.Queue[WorkItem | None]],
    ) -> None:
        for worker in self.workers:
            worker.stop()
        for queue in work_queues:
            with contextlib.suppress(asyncio.QueueFull):
                queue.put_nowait(None)
        _, pending = await asyncio.wait(worker_tasks, timeout=WORKER_SHUTDOWN_SECONDS)
        for task in pending:
            task.cancel()
        await asyncio.gather(*worker_tasks, return_exceptions=True)