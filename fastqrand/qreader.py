"""
FASTQRAND - Reader

Byte-stream facade over counter allocation + hash expansion.

    token = counter.next()          # one per read call
    expander.expand_into(token, b)  # fills b completely

HashReader is an io.RawIOBase, so it can be handed to anything that expects
a binary file object (readinto, read(n), io.BufferedReader, shutil.copyfileobj
with a bounded length). The stream is endless: readall() is unsupported.

PrefillReader trades memory for latency: background threads keep a bounded
queue of precomputed blocks. A block is taken by exactly one consumer and
its unused tail stays in that thread's local storage.

The module-level default reader is built once, at import. If the OS entropy
source fails, FatalEntropyUnavailable propagates out of the import.
"""
import io
import sys
import queue
import logging
import threading
from typing import Optional

from .qconfig import GeneratorConfig
from .qcounter import AtomicCounter, MutexCounter
from .qentropy import acquire_entropy
from .qexpand import HashExpander

logger = logging.getLogger("QRAND")

STOP_POLL_S = 0.1


class HashReader(io.RawIOBase):
    """Cryptographically strong random byte stream, safe for concurrent use"""

    def __init__(self, counter=None, metrics=None):
        super().__init__()
        self._expander = HashExpander(acquire_entropy())
        self._counter = counter if counter is not None else AtomicCounter()
        self._metrics = metrics

    def readable(self) -> bool:
        return True

    def _check_open(self):
        if self.closed:
            raise ValueError("I/O operation on closed reader")

    def _fill(self, view) -> int:
        """One token, whole view filled. Returns hash invocations."""
        if not len(view):
            return 0
        return self._expander.expand_into(self._counter.next(), view)

    def readinto(self, b) -> int:
        """Fill b with random data. Always returns len(b)."""
        self._check_open()
        view = memoryview(b).cast("B")
        n = len(view)
        if n == 0:
            return 0
        blocks = self._fill(view)
        if self._metrics is not None:
            self._metrics.record_read(n, blocks)
        return n

    def readall(self):
        raise io.UnsupportedOperation("random stream is endless; use read(n)")

    @property
    def counter(self):
        return self._counter

    def __repr__(self):
        return f"<{type(self).__name__} counter={type(self._counter).__name__}>"

    def __reduce__(self):
        raise TypeError(f"cannot pickle {type(self).__name__}: seed material is process-local")


class PrefillReader(HashReader):
    """HashReader backed by a bounded queue of precomputed blocks"""

    def __init__(self, depth: int = 64, block_size: int = 4096, workers: int = 1,
                 counter=None, metrics=None):
        super().__init__(counter=counter, metrics=metrics)
        self.block_size = block_size
        self._queue = queue.Queue(maxsize=depth)
        self._local = threading.local()
        self._stop = threading.Event()
        self._workers = [
            threading.Thread(target=self._fill_loop, name=f"fastqrand-prefill-{i}", daemon=True)
            for i in range(workers)
        ]
        for t in self._workers:
            t.start()
        logger.info(f"[PREFILL] {workers} worker(s) started (depth={depth}, block={block_size} bytes)")

    def _fill_loop(self):
        while not self._stop.is_set():
            block = bytearray(self.block_size)
            blocks = self._fill(memoryview(block))
            if self._metrics is not None:
                self._metrics.hash_blocks.inc(blocks)
            while not self._stop.is_set():
                try:
                    self._queue.put(block, timeout=STOP_POLL_S)
                    break
                except queue.Full:
                    continue

    def readinto(self, b) -> int:
        self._check_open()
        view = memoryview(b).cast("B")
        n = len(view)
        if n == 0:
            return 0
        pending = getattr(self._local, "pending", None)
        pos = 0
        inline_blocks = 0
        while pos < n:
            if not pending:
                try:
                    pending = memoryview(self._queue.get_nowait())
                except queue.Empty:
                    # Queue drained by a burst: generate the rest inline
                    if self._metrics is not None:
                        self._metrics.prefill_misses.inc()
                    inline_blocks = self._fill(view[pos:])
                    break
                if self._metrics is not None:
                    self._metrics.prefill_hits.inc()
            take = min(len(pending), n - pos)
            view[pos:pos + take] = pending[:take]
            pending = pending[take:]
            pos += take
        self._local.pending = pending
        if self._metrics is not None:
            self._metrics.record_read(n, inline_blocks)
        return n

    @property
    def queued(self) -> int:
        """Blocks currently waiting in the prefill queue"""
        return self._queue.qsize()

    def close(self):
        stop = getattr(self, "_stop", None)
        if stop is not None and not stop.is_set():
            stop.set()
            for t in self._workers:
                t.join(timeout=5 * STOP_POLL_S)
            # Discard precomputed output
            while True:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
            self._local = threading.local()
            logger.info("[PREFILL] Workers stopped")
        super().close()


def _gil_enabled() -> bool:
    check = getattr(sys, "_is_gil_enabled", None)
    return True if check is None else check()


def new_reader(config: Optional[GeneratorConfig] = None) -> HashReader:
    """
    Build a reader with fresh seed material

    Args:
        config: Reader parameters (reads FASTQRAND_* environment if None)

    Returns:
        HashReader (or PrefillReader for strategy="prefill")

    Raises:
        FatalEntropyUnavailable: OS entropy source failed
    """
    if config is None:
        config = GeneratorConfig.from_env()

    metrics = None
    if config.metrics:
        from .qmetrics import get_metrics
        metrics = get_metrics()
    on_epoch = metrics.record_epoch if metrics is not None else None

    use_mutex = config.strategy == "mutex"
    if not use_mutex and not _gil_enabled():
        # itertools.count is only atomic under the GIL
        logger.warning("[COUNTER] Free-threaded interpreter detected, using mutex counter")
        use_mutex = True
    counter_cls = MutexCounter if use_mutex else AtomicCounter
    counter = counter_cls(on_epoch=on_epoch)

    if config.strategy == "prefill":
        reader = PrefillReader(
            depth=config.prefill_depth,
            block_size=config.prefill_block,
            workers=config.prefill_workers,
            counter=counter,
            metrics=metrics,
        )
    else:
        reader = HashReader(counter=counter, metrics=metrics)

    logger.info(f"[READER] Ready (strategy={config.strategy}, counter={counter_cls.__name__})")
    return reader


# Global reader instance, seeded once at import
_default_reader = new_reader()


def default_reader() -> HashReader:
    """Process-wide shared reader"""
    return _default_reader
