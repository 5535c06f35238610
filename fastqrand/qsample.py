"""
FASTQRAND - Sampling

Unbiased draws on top of a reader. All functions take an optional `reader`
and default to the process-wide one.

Modulo bias is removed by rejection: draws are only accepted below the
largest multiple of n that fits the draw range, so every residue in [0, n)
has the same number of pre-images.
"""
import struct
import operator

from .errors import InvalidArgument
from .qreader import default_reader

MAX_U64 = (1 << 64) - 1

# Extra bytes drawn by bigintn beyond the bound's own width.
# Rejection probability is then below 2**-64.
BIGINT_SLACK_BYTES = 8

_U64 = struct.Struct("<Q")


def _resolve(reader):
    return reader if reader is not None else default_reader()


def read(b, reader=None) -> int:
    """Fill writable buffer b completely. Returns len(b)."""
    return _resolve(reader).readinto(b)


def bytes_(n: int, reader=None) -> bytes:
    """n fresh random bytes"""
    n = operator.index(n)
    if n < 0:
        raise InvalidArgument(f"fastqrand: argument to bytes_ is < 0 ({n})")
    buf = bytearray(n)
    _resolve(reader).readinto(buf)
    return bytes(buf)


def intn(n: int, reader=None) -> int:
    """
    Uniform random integer in [0, n)

    Raises:
        InvalidArgument: n <= 0
    """
    n = operator.index(n)
    if n <= 0:
        raise InvalidArgument(f"fastqrand: argument to intn is <= 0 ({n})")
    if n > MAX_U64:
        return bigintn(n, reader)

    # Worst case n = MAX_U64//4 + 1: max = MAX_U64 - MAX_U64//4,
    # an expected 1.333 draws.
    r_ = _resolve(reader)
    max_ = MAX_U64 - MAX_U64 % n
    buf = bytearray(8)
    r_.readinto(buf)
    r = _U64.unpack(buf)[0]
    while r >= max_:
        r_.readinto(buf)
        r = _U64.unpack(buf)[0]
    return r % n


def bigintn(n: int, reader=None) -> int:
    """
    Uniform random integer in [0, n) for arbitrary-precision n

    Draws byte_length(n) + BIGINT_SLACK_BYTES bytes as a little-endian
    integer r in [0, 2**(8k)) and rejects r >= limit, where limit is the
    largest multiple of n not above 2**(8k).

    Raises:
        InvalidArgument: n <= 0
    """
    n = operator.index(n)
    if n <= 0:
        raise InvalidArgument(f"fastqrand: argument to bigintn is <= 0 ({n})")

    k = (n.bit_length() + 7) // 8 + BIGINT_SLACK_BYTES
    space = 1 << (8 * k)
    limit = space - space % n
    r_ = _resolve(reader)
    buf = bytearray(k)
    while True:
        r_.readinto(buf)
        r = int.from_bytes(buf, "little")
        if r < limit:
            return r % n
