import hashlib

import pytest

from blindwage.hash import full_domain_hash


def test_output_length():
    assert len(full_domain_hash(b"a living wage", 1536)) == 192
    assert len(full_domain_hash(b"", 264)) == 33


def test_deterministic():
    assert full_domain_hash(b"x", 768) == full_domain_hash(b"x", 768)


def test_different_messages_differ():
    assert full_domain_hash(b"x", 768) != full_domain_hash(b"y", 768)


def test_first_block_is_counter_zero():
    expected = hashlib.sha256(b"salary" + (0).to_bytes(4, "big")).digest()
    assert full_domain_hash(b"salary", 256) == expected


def test_longer_output_extends_shorter():
    short = full_domain_hash(b"salary", 512)
    long = full_domain_hash(b"salary", 1536)
    assert long[:64] == short


@pytest.mark.parametrize("bits", [0, -8, 7, 1537])
def test_bad_output_bits(bits):
    with pytest.raises(ValueError):
        full_domain_hash(b"x", bits)
