import json
import logging
from pathlib import Path

import pytest

from hyperion.node.node_app import generate_random_tx, init_logging


@pytest.mark.parametrize("seed", [0, 1, 42, 214])
def test_generate_random_tx_is_deterministic(seed):
    first = generate_random_tx(seed)
    second = generate_random_tx(seed)
    assert first.double_sha256() == second.double_sha256()


@pytest.mark.parametrize("seed", range(20))
def test_generate_random_tx_shape(seed):
    tx = generate_random_tx(seed)
    assert 1 <= len(tx.inputs) <= 3
    assert 1 <= len(tx.outputs) <= 3
    for i, item in enumerate(tx.inputs):
        prefix, _, number = item.decode().partition("_")
        assert prefix == f"in{i}"
        assert 0 <= int(number) < 2**32
    for i, item in enumerate(tx.outputs):
        prefix, _, number = item.decode().partition("_")
        assert prefix == f"out{i}"
        assert 0 <= int(number) < 2**32


def test_different_seeds_give_different_transactions():
    hashes = {generate_random_tx(seed).double_sha256() for seed in range(50)}
    assert len(hashes) == 50


def test_init_logging_writes_json_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HYPERION_LOG", raising=False)
    handler = init_logging()
    logger = logging.getLogger("hyperion")
    try:
        assert Path(handler.baseFilename) == tmp_path / "logs" / "hyperion-node.log"
        assert handler.maxBytes == 10 * 1024 * 1024
        assert handler.backupCount == 9
        logging.getLogger("hyperion.node.sample").info("hello")
        handler.flush()
        lines = (tmp_path / "logs" / "hyperion-node.log").read_text().splitlines()
        record = json.loads(lines[-1])
        assert record["message"] == "hello"
        assert record["target"] == "hyperion.node.sample"
        assert record["level"] == "INFO"
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()