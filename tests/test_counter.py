"""
FASTQRAND - Counter Allocation Tests

Tests token uniqueness for both counter strategies:
- Sequential uniqueness across forced wraparounds
- Concurrent uniqueness (many threads, tiny wrap threshold)
- (outer token, inner counter) uniqueness of every hash input
- Threshold validation
"""
import hashlib
import sys
import threading
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastqrand import qexpand
from fastqrand.qcounter import AtomicCounter, MutexCounter, WRAP_THRESHOLD
from fastqrand.qreader import HashReader

COUNTERS = [AtomicCounter, MutexCounter]


def _hammer(counter, threads: int, per_thread: int):
    """Draw tokens from many threads at once, return all of them"""
    results = [[] for _ in range(threads)]
    start = threading.Barrier(threads)

    def worker(slot):
        start.wait()
        draw = counter.next
        out = results[slot]
        for _ in range(per_thread):
            out.append(draw())

    pool = [threading.Thread(target=worker, args=(i,)) for i in range(threads)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()
    return [tok for chunk in results for tok in chunk]


@pytest.mark.parametrize("counter_cls", COUNTERS)
def test_sequential_tokens_unique(counter_cls):
    """
    Test 1: Sequential tokens never repeat across wraparounds

    Expected: 10k distinct tokens, several epochs opened
    """
    counter = counter_cls(threshold=100)
    tokens = [counter.next() for _ in range(10_000)]

    assert len(set(tokens)) == len(tokens)
    assert counter.epochs >= 10_000 // 102
    assert all(0 <= low < 2 ** 64 and 0 <= high < 2 ** 64 for low, high in tokens)


@pytest.mark.parametrize("counter_cls", COUNTERS)
def test_concurrent_tokens_unique(counter_cls):
    """
    Test 2: Concurrent allocation never hands out a token twice

    Expected: 64 threads x 2000 draws, all distinct, even with epochs
    racing every few dozen draws
    """
    counter = counter_cls(threshold=37)
    tokens = _hammer(counter, threads=64, per_thread=2000)

    assert len(tokens) == 64 * 2000
    assert len(set(tokens)) == len(tokens)


def test_mutex_wrap_resets_low():
    """
    Test 3: MutexCounter moves to the next high word with low back at 0

    Expected: (0,0) (1,0) (2,0) (3,0) (0,1) ...
    """
    counter = MutexCounter(threshold=2)
    tokens = [counter.next() for _ in range(6)]

    assert tokens == [(0, 0), (1, 0), (2, 0), (3, 0), (0, 1), (1, 1)]
    assert counter.epochs == 1


def test_atomic_wrap_opens_epoch():
    """
    Test 4: AtomicCounter opens a fresh epoch past the threshold

    Expected: the token that crossed is still returned, next epoch starts at 0
    """
    epochs = []
    counter = AtomicCounter(threshold=2, on_epoch=epochs.append)
    tokens = [counter.next() for _ in range(6)]

    assert tokens == [(0, 0), (1, 0), (2, 0), (3, 0), (0, 1), (1, 1)]
    assert epochs == [1]


@pytest.mark.parametrize("counter_cls", COUNTERS)
@pytest.mark.parametrize("threshold", [-1, WRAP_THRESHOLD + 1])
def test_threshold_validation(counter_cls, threshold):
    """Thresholds outside [0, 2**63] are rejected"""
    with pytest.raises(ValueError):
        counter_cls(threshold=threshold)


@pytest.mark.parametrize("counter_cls", COUNTERS)
def test_hash_inputs_never_repeat(monkeypatch, counter_cls):
    """
    Test 5: Every hash invocation sees a distinct (low, high, inner) header

    Instruments the hash call inside the expander, then drives multi-block
    reads from 32 threads with a tiny wrap threshold.

    Expected: no header observed twice
    """
    reader = HashReader(counter=counter_cls(threshold=11))
    real_blake2b = hashlib.blake2b
    headers = []
    lock = threading.Lock()

    def recording_blake2b(data, *args, **kwargs):
        with lock:
            headers.append(bytes(data[:24]))
        return real_blake2b(data, *args, **kwargs)

    monkeypatch.setattr(qexpand.hashlib, "blake2b", recording_blake2b)

    def worker():
        buf = bytearray(200)  # 4 blocks per read
        for _ in range(300):
            reader.readinto(buf)

    pool = [threading.Thread(target=worker) for _ in range(32)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()

    assert len(headers) == 32 * 300 * 4
    assert len(set(headers)) == len(headers)
