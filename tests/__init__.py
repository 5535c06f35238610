"""
FASTQRAND - Test Acceptance Criteria
Binding thresholds for all statistical and concurrency tests
"""

# Entropy check: this many output bytes must not shrink under compression
ENTROPY_SAMPLE_BYTES = 10_000

# intn distribution: draws into buckets, each within +/- tolerance of the mean
INTN_CRITERIA = {
    "draws": 10_000,
    "buckets": 10,
    "tolerance": 0.10
}

# perm distribution: n=5 -> 120 permutations, ~100 sightings each
PERM_CRITERIA = {
    "n": 5,
    "trials": 12_000,
    "min_count": 50,
    "max_count": 150
}

# Concurrency: threads hammering the shared reader for a sustained interval
CONCURRENCY_CRITERIA = {
    "threads": 64,
    "duration_s": 0.3
}

# chi-square sanity floor (scipy.stats.chisquare p-value)
CHI2_MIN_PVALUE = 1e-4


def compresses(data: bytes) -> bool:
    """True if zlib at level 9 shrinks data - i.e. entropy is too low"""
    import zlib
    return len(zlib.compress(data, 9)) < len(data)
