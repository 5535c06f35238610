"""
FASTQRAND - Prometheus metrics

Counters are registered on the prometheus_client default registry the first
time get_metrics() is called (only when FASTQRAND_METRICS=1 or a reader is
built with metrics=True). Exposition is up to the host application, e.g.
prometheus_client.start_http_server(9090).

Exported:
- fastqrand_reads_total
- fastqrand_bytes_total
- fastqrand_hash_blocks_total
- fastqrand_counter_epochs_total
- fastqrand_prefill_hits_total / fastqrand_prefill_misses_total
"""
import logging
import threading

from prometheus_client import Counter

logger = logging.getLogger("QRAND")


class GeneratorMetrics:
    """Counter bundle shared by all readers in the process"""

    def __init__(self, registry=None):
        kwargs = {} if registry is None else {"registry": registry}
        self.reads = Counter("fastqrand_reads_total", "Read requests served", **kwargs)
        self.bytes = Counter("fastqrand_bytes_total", "Random bytes produced", **kwargs)
        self.hash_blocks = Counter("fastqrand_hash_blocks_total", "Hash invocations", **kwargs)
        self.counter_epochs = Counter(
            "fastqrand_counter_epochs_total", "High-word increments of the token counter", **kwargs
        )
        self.prefill_hits = Counter(
            "fastqrand_prefill_hits_total", "Blocks served from the prefill queue", **kwargs
        )
        self.prefill_misses = Counter(
            "fastqrand_prefill_misses_total", "Prefill queue empty, generated inline", **kwargs
        )

    def record_read(self, nbytes: int, blocks: int):
        self.reads.inc()
        self.bytes.inc(nbytes)
        self.hash_blocks.inc(blocks)

    def record_epoch(self, high: int):
        self.counter_epochs.inc()


# Global metrics instance (initialized on first use)
_metrics = None
_metrics_lock = threading.Lock()


def get_metrics() -> GeneratorMetrics:
    """Get or create the global metrics bundle"""
    global _metrics
    if _metrics is None:
        with _metrics_lock:
            if _metrics is None:
                _metrics = GeneratorMetrics()
                logger.info("[METRICS] Prometheus counters registered")
    return _metrics
