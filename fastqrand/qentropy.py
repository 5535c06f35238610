import os
import hashlib
import logging

from .errors import FatalEntropyUnavailable

logger = logging.getLogger("QRAND")

# Raw bytes pulled from the OS, compressed to SEED_SIZE.
RAW_SEED_SIZE = 64
SEED_SIZE = 32


def acquire_entropy() -> bytes:
    """
    Read seed material from the OS CSPRNG (fail-closed)

    Returns:
        SEED_SIZE bytes: BLAKE2b-256 of RAW_SEED_SIZE bytes of os.urandom

    Raises:
        FatalEntropyUnavailable: source errored or returned a short read
    """
    try:
        raw = os.urandom(RAW_SEED_SIZE)
    except (OSError, NotImplementedError) as e:
        logger.critical(f"[ENTROPY] OS entropy source unavailable: {e}")
        raise FatalEntropyUnavailable("fastqrand: no entropy available") from e

    if len(raw) < RAW_SEED_SIZE:
        logger.critical(f"[ENTROPY] Short read from OS entropy source ({len(raw)}/{RAW_SEED_SIZE} bytes)")
        raise FatalEntropyUnavailable(
            f"fastqrand: short entropy read ({len(raw)}/{RAW_SEED_SIZE} bytes)"
        )

    seed = hashlib.blake2b(raw, digest_size=SEED_SIZE).digest()
    logger.info(f"[ENTROPY] Seed acquired ({RAW_SEED_SIZE} bytes -> blake2b-{SEED_SIZE * 8})")
    return seed
