"""
FASTQRAND - Error types

Only two failure kinds exist:
- FatalEntropyUnavailable: the OS entropy source failed at seeding time.
  Fail-closed, there is no fallback source.
- InvalidArgument: caller passed a bound outside the valid domain.
"""


class FatalEntropyUnavailable(RuntimeError):
    """OS entropy source failed or returned fewer bytes than requested"""


class InvalidArgument(ValueError):
    """Bound outside the valid domain (e.g. intn(n) with n <= 0)"""
