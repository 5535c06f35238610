"""
FASTQRAND - Throughput Benchmark

Compares fastqrand readers against os.urandom for small and large reads,
single-threaded and across many threads.

Usage:
    python tools/bench_throughput.py
    python tools/bench_throughput.py --threads 1 4 64 --sizes 32 512000 --duration 2
    python tools/bench_throughput.py --strategies atomic prefill

Output per case: MB/s, per-call latency P50/P95/P99 (us), process RSS.
"""
import argparse
import logging
import os
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List

import numpy as np
import psutil

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastqrand import GeneratorConfig, new_reader

logger = logging.getLogger("BENCH")


def run_case(fill: Callable[[int], None], size: int, threads: int, duration: float) -> Dict:
    """
    Call fill(size) from `threads` threads for `duration` seconds

    Returns:
        dict: calls, throughput_mbps, latency percentiles (us)
    """
    latencies: List[List[float]] = [[] for _ in range(threads)]
    start = threading.Barrier(threads + 1)
    stop = threading.Event()

    def worker(slot):
        lat = latencies[slot]
        start.wait()
        while not stop.is_set():
            t0 = time.perf_counter()
            fill(size)
            lat.append(time.perf_counter() - t0)

    pool = [threading.Thread(target=worker, args=(i,), daemon=True) for i in range(threads)]
    for t in pool:
        t.start()

    start.wait()
    t_start = time.perf_counter()
    time.sleep(duration)
    stop.set()
    for t in pool:
        t.join()
    elapsed = time.perf_counter() - t_start

    all_lat = np.array([x for lat in latencies for x in lat]) * 1e6
    calls = len(all_lat)
    return {
        "calls": calls,
        "throughput_mbps": calls * size / elapsed / 1e6,
        "p50_us": float(np.percentile(all_lat, 50)) if calls else 0.0,
        "p95_us": float(np.percentile(all_lat, 95)) if calls else 0.0,
        "p99_us": float(np.percentile(all_lat, 99)) if calls else 0.0,
    }


def make_fillers(strategies: List[str]) -> Dict[str, Callable[[int], None]]:
    fillers = {"os.urandom": lambda n: os.urandom(n)}
    for strategy in strategies:
        reader = new_reader(GeneratorConfig(strategy=strategy))
        fillers[f"fastqrand/{strategy}"] = lambda n, r=reader: r.readinto(bytearray(n))
    return fillers


def main():
    parser = argparse.ArgumentParser(description="fastqrand throughput benchmark")
    parser.add_argument("--threads", type=int, nargs="+", default=[1, 4, 64])
    parser.add_argument("--sizes", type=int, nargs="+", default=[32, 512_000])
    parser.add_argument("--duration", type=float, default=1.0, help="seconds per case")
    parser.add_argument("--strategies", nargs="+", default=["atomic", "mutex", "prefill"],
                        choices=["atomic", "mutex", "prefill"])
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[%(asctime)s] %(levelname)s - %(message)s'
    )

    fillers = make_fillers(args.strategies)
    process = psutil.Process()

    print("\n" + "=" * 70)
    print("FASTQRAND - THROUGHPUT BENCHMARK")
    print("=" * 70)
    print(f"  Threads: {args.threads}")
    print(f"  Sizes: {args.sizes}")
    print(f"  Duration per case: {args.duration:.1f}s")
    print("=" * 70)

    for size in args.sizes:
        for threads in args.threads:
            print(f"\n[{size} bytes x {threads} thread(s)]")
            for name, fill in fillers.items():
                res = run_case(fill, size, threads, args.duration)
                rss_mb = process.memory_info().rss / 1e6
                print(f"  {name:20s} {res['throughput_mbps']:9.1f} MB/s  "
                      f"P50 {res['p50_us']:8.1f}us  P95 {res['p95_us']:8.1f}us  "
                      f"P99 {res['p99_us']:8.1f}us  RSS {rss_mb:6.1f}MB")

    print("\n" + "=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
