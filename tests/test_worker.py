import asyncio
import threading

import pytest

from hyperion.core.block import compute_merkle_root
from hyperion.core.consensus import validate_pow
from hyperion.core.crypto import HASH_SIZE
from hyperion.core.header import Header
from hyperion.core.transaction import Transaction
from hyperion.miner.worker import BATCH_SIZE, MiningWorker, WorkItem

EASY = 0x207FFFFF
IMPOSSIBLE = 0x01000000


def make_work(difficulty, start=0, nonce_range=1000, work_id=0):
    txs = [Transaction([b"in"], [b"out"])]
    header = Header(1, 123, difficulty, 0, bytes(HASH_SIZE), compute_merkle_root(txs))
    return WorkItem(header, start, nonce_range, txs, work_id)


def make_worker(worker_id=3):
    connected = threading.Event()
    connected.set()
    worker = MiningWorker(worker_id, connected)
    worker.running.set()
    return worker


@pytest.mark.asyncio
async def test_finds_solution_at_easy_difficulty():
    worker = make_worker()
    work = make_work(EASY)
    result = await worker.mine_work(work)
    assert result.worker_id == 3
    assert result.block.header.nonce == result.nonce
    assert validate_pow(result.block.header)
    assert result.block.transactions == work.transactions
    assert result.block.header.merkle_root == compute_merkle_root(work.transactions)


@pytest.mark.asyncio
async def test_solution_lies_in_assigned_range():
    worker = make_worker()
    result = await worker.mine_work(make_work(EASY, start=5000, nonce_range=1000))
    assert 5000 <= result.nonce < 6000
    assert worker.hashes_computed == result.nonce - 5000


@pytest.mark.asyncio
async def test_work_header_is_not_modified():
    worker = make_worker()
    work = make_work(EASY, start=40)
    await worker.mine_work(work)
    assert work.header.nonce == 0


@pytest.mark.asyncio
async def test_exhausted_range_returns_none_and_counts_hashes():
    worker = make_worker()
    nonce_range = BATCH_SIZE + 50
    result = await worker.mine_work(make_work(IMPOSSIBLE, nonce_range=nonce_range))
    assert result is None
    assert worker.hashes_computed == nonce_range


@pytest.mark.asyncio
async def test_cancelled_work_is_abandoned():
    worker = make_worker()
    work = make_work(EASY)
    work.cancel.set()
    assert await worker.mine_work(work) is None
    assert worker.hashes_computed == 0


@pytest.mark.asyncio
async def test_solution_found_elsewhere_is_abandoned():
    worker = make_worker()
    work = make_work(EASY)
    work.solution_found.set()
    assert await worker.mine_work(work) is None
    assert worker.hashes_computed == 0


@pytest.mark.asyncio
async def test_stopped_worker_does_not_mine():
    worker = make_worker()
    worker.stop()
    assert await worker.mine_work(make_work(EASY)) is None
    assert worker.hashes_computed == 0


@pytest.mark.asyncio
async def test_stale_work_is_abandoned():
    worker = make_worker()
    worker.current_work_id = 2
    assert await worker.mine_work(make_work(EASY, work_id=1)) is None
    assert worker.hashes_computed == 0


@pytest.mark.asyncio
async def test_start_mines_queued_work_until_closed():
    worker = make_worker(worker_id=1)
    work_queue = asyncio.Queue()
    result_queue = asyncio.Queue()
    await work_queue.put(make_work(EASY, work_id=7))
    await work_queue.put(None)

    await asyncio.wait_for(worker.start(work_queue, result_queue), timeout=10)

    result = result_queue.get_nowait()
    assert result.worker_id == 1
    assert validate_pow(result.block.header)
    assert worker.current_work_id == 7
    assert result_queue.empty()


@pytest.mark.asyncio
async def test_stop_ends_idle_worker():
    worker = make_worker()
    task = asyncio.create_task(worker.start(asyncio.Queue(), asyncio.Queue()))
    await asyncio.sleep(0.05)
    assert worker.running.is_set()
    worker.stop()
    await asyncio.wait_for(task, timeout=2)
    assert task.done()
    assert not worker.running.is_set()


def test_restart_leaves_worker_running():
    worker = make_worker()
    worker.stop()
    worker.restart()
    assert worker.running.is_set()