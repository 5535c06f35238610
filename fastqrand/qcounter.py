"""
FASTQRAND - Counter allocation

Every read request gets a 128-bit token (low, high) that no other request
ever receives. The token is the outer half of each hash input, so token
uniqueness is what keeps hash inputs from ever repeating.

Strategies:
- AtomicCounter: lock-free. next() on itertools.count is a single C-level
  fetch-and-increment, atomic under the interpreter lock. Counter state is
  one immutable (high, lows) epoch tuple swapped by reference assignment.
- MutexCounter: plain 128-bit counter behind a threading.Lock.
"""
import itertools
import logging
import threading
from typing import Callable, Optional, Tuple

logger = logging.getLogger("QRAND")

MAX_U64 = (1 << 64) - 1

# Low word value that triggers a high-word increment.
WRAP_THRESHOLD = 1 << 63

Token = Tuple[int, int]


def _check_threshold(threshold: int) -> int:
    if not 0 <= threshold <= WRAP_THRESHOLD:
        raise ValueError(f"threshold must be in [0, 2**63], got {threshold}")
    return threshold


class AtomicCounter:
    """
    Lock-free 128-bit token allocator

    When a drawn low word exceeds the threshold, the drawing thread opens a
    new epoch: fresh high word, low restarting at 0. Threads racing past the
    threshold may each open an epoch. That skips the rest of the old epoch's
    low range (at most 2**63 values) but high words come from their own
    counter, so no epoch is ever opened twice and no (low, high) pair repeats.
    """

    def __init__(self, threshold: int = WRAP_THRESHOLD,
                 on_epoch: Optional[Callable[[int], None]] = None):
        self.threshold = _check_threshold(threshold)
        self._on_epoch = on_epoch
        self._highs = itertools.count()
        self._epoch = (next(self._highs), itertools.count())

    def next(self) -> Token:
        high, lows = self._epoch
        low = next(lows)
        if low > self.threshold:
            new_high = next(self._highs)
            self._epoch = (new_high, itertools.count())
            logger.debug(f"[COUNTER] Epoch {new_high} opened (low={low})")
            if self._on_epoch is not None:
                self._on_epoch(new_high)
        return low, high

    @property
    def epochs(self) -> int:
        """High-word increments so far"""
        return self._epoch[0]


class MutexCounter:
    """128-bit token allocator guarded by a lock"""

    def __init__(self, threshold: int = WRAP_THRESHOLD,
                 on_epoch: Optional[Callable[[int], None]] = None):
        self.threshold = _check_threshold(threshold)
        self._on_epoch = on_epoch
        self._lock = threading.Lock()
        self._low = 0
        self._high = 0

    def next(self) -> Token:
        wrapped = None
        with self._lock:
            token = (self._low, self._high)
            self._low += 1
            if token[0] > self.threshold:
                self._high += 1
                self._low = 0
                wrapped = self._high
        if wrapped is not None:
            logger.debug(f"[COUNTER] Epoch {wrapped} opened (low={token[0]})")
            if self._on_epoch is not None:
                self._on_epoch(wrapped)
        return token

    @property
    def epochs(self) -> int:
        return self._high
