"""
FASTQRAND - Hash Expansion Tests
"""
import hashlib
import pickle
import struct
import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastqrand.qexpand import HashExpander, hash_blocks, DIGEST_SIZE

SEED = bytes(range(32))


@pytest.fixture
def expander():
    return HashExpander(SEED)


@pytest.mark.parametrize("length", [0, 1, 63, 64, 65, 127, 128, 129, 1000, 70_000])
def test_exact_length(expander, length):
    """Output is truncated to exactly the requested length"""
    assert len(expander.expand((1, 0), length)) == length


def test_first_block_layout(expander):
    """Block i is BLAKE2b-512(low || high || i || seed), little-endian u64 words"""
    low, high = 5, 9
    out = expander.expand((low, high), 2 * DIGEST_SIZE)

    block0 = hashlib.blake2b(struct.pack("<QQQ", low, high, 0) + SEED).digest()
    block1 = hashlib.blake2b(struct.pack("<QQQ", low, high, 1) + SEED).digest()
    assert out == block0 + block1


def test_truncation_is_prefix(expander):
    """A shorter request for the same token is a prefix of a longer one"""
    long_out = expander.expand((3, 0), 300)
    assert expander.expand((3, 0), 130) == long_out[:130]


def test_distinct_tokens_distinct_streams(expander):
    """Low and high words both feed the hash"""
    a = expander.expand((1, 0), 64)
    b = expander.expand((2, 0), 64)
    c = expander.expand((1, 1), 64)
    assert len({a, b, c}) == 3


def test_seed_feeds_the_hash():
    """Same token under different seeds gives unrelated output"""
    other = HashExpander(bytes(32))
    assert HashExpander(SEED).expand((1, 0), 64) != other.expand((1, 0), 64)


def test_expand_into_reports_blocks(expander):
    """expand_into returns the number of hash invocations"""
    buf = bytearray(129)
    assert expander.expand_into((0, 0), memoryview(buf)) == 3
    assert expander.expand_into((0, 1), memoryview(bytearray(0))) == 0
    assert hash_blocks(129) == 3
    assert hash_blocks(0) == 0
    assert hash_blocks(64) == 1


@pytest.mark.parametrize("size", [0, 16, 31, 65, 128])
def test_seed_size_validation(size):
    """Seeds must be 32-64 bytes"""
    with pytest.raises(ValueError):
        HashExpander(bytes(size))


def test_seed_never_exposed(expander):
    """Seed hidden from repr, pickling refused, no attribute dict"""
    assert SEED.hex() not in repr(expander)
    assert "hidden" in repr(expander)
    with pytest.raises(TypeError):
        pickle.dumps(expander)
    assert not hasattr(expander, "__dict__")
