import operator
from typing import List, MutableSequence

from .errors import InvalidArgument
from .qsample import intn


def perm(n: int, reader=None) -> List[int]:
    """ Random permutation of [0, n) (inside-out Fisher-Yates). """
    n = operator.index(n)
    if n < 0:
        raise InvalidArgument(f"fastqrand: argument to perm is < 0 ({n})")
    m = [0] * n
    for i in range(1, n):
        j = intn(i + 1, reader)
        m[i] = m[j]
        m[j] = i
    return m


def shuffle(x: MutableSequence, reader=None) -> None:
    """ In-place uniform shuffle (Fisher-Yates, high index down). """
    for i in reversed(range(1, len(x))):
        j = intn(i + 1, reader)
        x[i], x[j] = x[j], x[i]
