"""
FASTQRAND - Hash expansion

Turns a unique token plus the secret seed into an arbitrarily long stream:

    block_i = BLAKE2b-512( low || high || i || seed )     (u64 little-endian)
    output  = block_0 || block_1 || ...  truncated to the requested length

i is the inner counter, local to one call. Tokens are never shared between
calls, so no two invocations of the hash ever see the same input.
"""
import hashlib
import struct
from typing import Tuple

DIGEST_SIZE = 64

_HEADER = struct.Struct("<QQQ")


def hash_blocks(length: int) -> int:
    """Number of hash invocations needed for `length` output bytes"""
    return -(-length // DIGEST_SIZE)


class HashExpander:
    """Seed holder and block generator. The seed never leaves this object."""

    __slots__ = ("_seed",)

    def __init__(self, seed: bytes):
        if not 32 <= len(seed) <= 64:
            raise ValueError(f"seed must be 32-64 bytes, got {len(seed)}")
        self._seed = bytes(seed)

    def expand_into(self, token: Tuple[int, int], out: memoryview) -> int:
        """
        Fill `out` completely with the stream for `token`

        Args:
            token: (low, high) from a counter allocator, used once
            out: writable byte-format memoryview

        Returns:
            Number of hash invocations performed
        """
        low, high = token
        seed = self._seed
        pack = _HEADER.pack
        blake2b = hashlib.blake2b
        n = len(out)
        pos = 0
        inner = 0
        while pos < n:
            chunk = blake2b(pack(low, high, inner) + seed).digest()
            take = min(DIGEST_SIZE, n - pos)
            out[pos:pos + take] = chunk[:take]
            pos += take
            inner += 1
        return inner

    def expand(self, token: Tuple[int, int], length: int) -> bytes:
        buf = bytearray(length)
        self.expand_into(token, memoryview(buf))
        return bytes(buf)

    def __repr__(self):
        return f"<{type(self).__name__} seed=<{len(self._seed)} bytes hidden>>"

    def __reduce__(self):
        raise TypeError(f"cannot pickle {type(self).__name__}: seed material is process-local")
