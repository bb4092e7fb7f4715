"""Node entry point: chain, mempool, RPC server and peer listener."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import random
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from hyperion.core.blockchain import Blockchain
from hyperion.core.errors import HyperionError
from hyperion.core.transaction import Transaction
from hyperion.node import storage
from hyperion.node.handlers import NodeState
from hyperion.node.mempool import Mempool
from hyperion.node.network import start_network_listener
from hyperion.node.server import start_server

_log = logging.getLogger("hyperion.node")

RPC_PORT = 6001
P2P_ADDRESS = "127.0.0.1:6000"
TEST_TX_COUNT = 215
LOG_FILE = Path("logs") / "hyperion-node.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 9
LOG_LEVEL_ENV = "HYPERION_LOG"


def generate_random_tx(seed: int) -> Transaction:
    """Build a deterministic pseudo-random transaction from ``seed``."""
    rng = random.Random(seed)
    num_inputs = rng.randint(1, 3)
    num_outputs = rng.randint(1, 3)
    inputs = [f"in{i}_{rng.getrandbits(32)}".encode() for i in range(num_inputs)]
    outputs = [f"out{i}_{rng.getrandbits(32)}".encode() for i in range(num_outputs)]
    return Transaction(inputs, outputs)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(
            {
                "timestamp": self.formatTime(record),
                "level": record.levelname,
                "target": record.name,
                "thread": record.thread,
                "message": record.getMessage(),
            }
        )


def init_logging() -> RotatingFileHandler:
    """Log to the console and to a rotating JSON file; return the file handler."""
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logger = logging.getLogger("hyperion")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    logger.addHandler(console)

    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS)
    file_handler.setFormatter(_JsonFormatter())
    logger.addHandler(file_handler)
    return file_handler


async def _wait_for_interrupt() -> None:
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    try:
        loop.add_signal_handler(signal.SIGINT, stop.set)
    except (NotImplementedError, RuntimeError):
        signal.signal(signal.SIGINT, lambda *_: loop.call_soon_threadsafe(stop.set))
        await stop.wait()
        return
    try:
        await stop.wait()
    finally:
        loop.remove_signal_handler(signal.SIGINT)


async def _serve_rpc(state: NodeState) -> None:
    try:
        await start_server(state, RPC_PORT)
    except OSError as exc:
        _log.error("RPC server error: %s", exc)


async def _serve_p2p() -> None:
    try:
        await start_network_listener(P2P_ADDRESS)
    except OSError as exc:
        _log.error("P2P listener error: %s", exc)


async def run_node() -> None:
    """Run the node until interrupted, then save the chain."""
    _log.info("Starting Hyperion Node...")
    try:
        chain = storage.load_chain()
    except (OSError, HyperionError, ValueError) as exc:
        _log.warning("Failed to load chain from disk: %s, creating new genesis", exc)
        chain = Blockchain.with_genesis()

    mempool = Mempool.load()
    _log.info("Genesis Block: %s", chain.get_block_by_height(0).double_sha256().hex())

    for seed in range(TEST_TX_COUNT):
        mempool.add_tx(generate_random_tx(seed))
    _log.info("Added %d test transactions to mempool", TEST_TX_COUNT)

    state = NodeState(chain, mempool)
    tasks = [asyncio.create_task(_serve_rpc(state)), asyncio.create_task(_serve_p2p())]

    _log.info("RPC server listening on 127.0.0.1:%d", RPC_PORT)
    _log.info("P2P listener on %s", P2P_ADDRESS)
    _log.info("Press Ctrl+C to stop")

    try:
        await _wait_for_interrupt()
        _log.info("Shutting down Hyperion Node...")
        async with state.lock:
            try:
                storage.save_chain(state.chain)
            except OSError as exc:
                _log.error("Failed to save blockchain to disk: %s", exc)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    _log.info("Node stopped.")


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point for the node."""
    parser = argparse.ArgumentParser(prog="hyperion-node", description="Hyperion blockchain node")
    parser.parse_args(argv)
    try:
        init_logging()
    except OSError as exc:
        print(f"Failed to initialize logging: {exc}", file=sys.stderr)
        return 1
    asyncio.run(run_node())
    return 0