"""
FASTQRAND - Generator configuration

Environment:
    FASTQRAND_STRATEGY=atomic      # atomic | mutex | prefill
    FASTQRAND_PREFILL_DEPTH=64     # blocks held in the prefill queue
    FASTQRAND_PREFILL_BLOCK=4096   # bytes per precomputed block
    FASTQRAND_PREFILL_WORKERS=1    # background prefill threads
    FASTQRAND_METRICS=0            # 1 = export Prometheus counters

Variables are read when GeneratorConfig.from_env() is called, not at module
import, so tests can set them after import.
"""
import os
from dataclasses import dataclass

STRATEGIES = ("atomic", "mutex", "prefill")

MIN_PREFILL_BLOCK = 64


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class GeneratorConfig:
    """Reader construction parameters"""
    strategy: str = "atomic"
    prefill_depth: int = 64
    prefill_block: int = 4096
    prefill_workers: int = 1
    metrics: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy {self.strategy!r} (expected one of {', '.join(STRATEGIES)})"
            )
        if self.prefill_depth < 1:
            raise ValueError(f"prefill_depth must be >= 1, got {self.prefill_depth}")
        if self.prefill_block < MIN_PREFILL_BLOCK:
            raise ValueError(
                f"prefill_block must be >= {MIN_PREFILL_BLOCK}, got {self.prefill_block}"
            )
        if self.prefill_workers < 1:
            raise ValueError(f"prefill_workers must be >= 1, got {self.prefill_workers}")

    @classmethod
    def from_env(cls) -> 'GeneratorConfig':
        """Build config from FASTQRAND_* environment variables"""
        return cls(
            strategy=os.getenv("FASTQRAND_STRATEGY", "atomic").strip().lower() or "atomic",
            prefill_depth=_env_int("FASTQRAND_PREFILL_DEPTH", cls.prefill_depth),
            prefill_block=_env_int("FASTQRAND_PREFILL_BLOCK", cls.prefill_block),
            prefill_workers=_env_int("FASTQRAND_PREFILL_WORKERS", cls.prefill_workers),
            metrics=os.getenv("FASTQRAND_METRICS", "0") == "1",
        )
