import pytest

from hyperion.core.block import Block
from hyperion.core.blockchain import Blockchain
from hyperion.core.crypto import HASH_SIZE
from hyperion.core.encoding import DecodeError
from hyperion.core.header import Header
from hyperion.core.transaction import Transaction
from hyperion.node.storage import load_chain, save_chain


def _chain() -> Blockchain:
    tx = Transaction([b"in"], [b"out"])
    genesis = Block.with_merkle(Header(1, 123, 0x207FFFFF, 0, bytes(HASH_SIZE), bytes(HASH_SIZE)), [tx])
    chain = Blockchain.from_genesis(genesis)
    nxt = Block.with_merkle(
        Header(1, 124, 0x207FFFFF, 0, genesis.double_sha256(), bytes(HASH_SIZE)), [tx]
    )
    chain.add_block(nxt, skip_pow=True)
    return chain


def test_round_trip(tmp_path):
    chain = _chain()
    path = tmp_path / "chain.dat"
    save_chain(chain, path)
    loaded = load_chain(path)
    assert [b.double_sha256() for b in loaded] == [b.double_sha256() for b in chain]
    assert loaded.validate_with_options(True)


def test_default_path_used(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    save_chain(_chain())
    assert (tmp_path / "blockchain.dat").exists()
    assert len(load_chain()) == 2


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_chain(tmp_path / "absent.dat")


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "bad.dat"
    path.write_bytes(b"\x01\x01")
    with pytest.raises(DecodeError):
        load_chain(path)