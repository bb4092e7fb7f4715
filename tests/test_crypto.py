import pytest

from hyperion.core.crypto import HASH_SIZE, Hashable, double_sha256


class _Fixed(Hashable):
    def __init__(self, payload: bytes) -> None:
        self.payload = payload

    def serialize(self) -> bytes:
        return self.payload


def test_double_sha256_of_empty_input():
    assert (
        double_sha256(b"").hex()
        == "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"
    )


def test_digest_size():
    assert len(double_sha256(b"some data")) == HASH_SIZE


def test_deterministic_and_distinct():
    assert double_sha256(b"a") == double_sha256(b"a")
    assert double_sha256(b"a") != double_sha256(b"b")


def test_hashable_hashes_serialized_form():
    obj = _Fixed(b"payload")
    assert obj.double_sha256() == double_sha256(b"payload")


def test_hashable_equal_encodings_equal_hashes():
    first = _Fixed(b"x").double_sha256()
    assert first == _Fixed(b"x").double_sha256()
    assert first == double_sha256(b"x")
    assert first != _Fixed(b"y").double_sha256()
    assert len(first) == HASH_SIZE


def test_hashable_is_abstract():
    with pytest.raises(TypeError):
        Hashable()