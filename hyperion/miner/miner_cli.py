"""Command-line entry point for the miner."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys

from hyperion.core.errors import HyperionError
from hyperion.miner.miner_config import MiningConfig
from hyperion.miner.solo import SoloMiner

_log = logging.getLogger(__name__)

VERSION = "0.1.0"
DEFAULT_CONFIG_PATH = "config.toml"
DEFAULT_NODE_URL = "http://127.0.0.1:6001"
LOG_LEVEL_ENV = "HYPERION_LOG"
SHUTDOWN_GRACE_SECONDS = 5.0


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the miner command."""
    parser = argparse.ArgumentParser(
        prog="hyperion-miner", description="Hyperion cryptocurrency miner"
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        default=DEFAULT_CONFIG_PATH,
        help="Configuration file path",
    )
    parser.add_argument(
        "-n",
        "--node-url",
        metavar="URL",
        default=DEFAULT_NODE_URL,
        help="Hyperion node URL",
    )
    parser.add_argument("-t", "--threads", metavar="NUMBER", help="Number of mining threads")
    return parser


def init_logging() -> logging.Handler:
    """Send package logs to the console; return the console handler."""
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logger = logging.getLogger("hyperion")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    logger.addHandler(console)
    return console


def _parse_threads(text: str) -> int:
    threads = int(text)
    if threads < 0:
        raise ValueError(f"invalid thread count {text!r}")
    return threads


async def _interrupted() -> None:
    loop = asyncio.get_running_loop()
    event = asyncio.Event()
    try:
        loop.add_signal_handler(signal.SIGINT, event.set)
    except (NotImplementedError, RuntimeError):
        previous = signal.signal(
            signal.SIGINT, lambda *_: loop.call_soon_threadsafe(event.set)
        )
        try:
            await event.wait()
        finally:
            signal.signal(signal.SIGINT, previous)
        return
    try:
        await event.wait()
    finally:
        loop.remove_signal_handler(signal.SIGINT)


async def run(config: MiningConfig) -> None:
    """Mine with ``config`` until mining fails or Ctrl+C is pressed."""
    _log.info("Starting Hyperion Miner...")
    _log.info("Node URL: %s", config.node_url)
    _log.info("Mining threads: %d", config.threads)

    async with await SoloMiner.create(config) as miner:
        mining = asyncio.create_task(miner.start_mining())
        interrupt = asyncio.create_task(_interrupted())
        await asyncio.wait({mining, interrupt}, return_when=asyncio.FIRST_COMPLETED)

        if mining.done():
            interrupt.cancel()
            await asyncio.gather(interrupt, return_exceptions=True)
            error = mining.exception()
            if error is not None:
                _log.error("Mining error: %s", error)
        else:
            _log.info("Received shutdown signal, stopping miner...")
            await miner.stop()
            done, _ = await asyncio.wait({mining}, timeout=SHUTDOWN_GRACE_SECONDS)
            if not done:
                mining.cancel()
            await asyncio.gather(mining, return_exceptions=True)

    _log.info("Miner stopped.")


def main(argv: list[str] | None = None) -> int:
    """Run the miner command; return the process exit status."""
    args = build_parser().parse_args(argv)
    try:
        init_logging()
    except (ValueError, OSError) as exc:
        print(f"Failed to initialize logging: {exc}", file=sys.stderr)
        return 1

    try:
        config = MiningConfig.load(args.config)
        config.node_url = args.node_url
        if args.threads is not None:
            config.threads = _parse_threads(args.threads)
        asyncio.run(run(config))
    except (HyperionError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0