from __future__ import annotations

from typing import List, Tuple

Selection = Tuple[int, ...]


class _Permuter:
    """Generation context shared by every level of the recursion.

    With ``ascending`` set, each depth only tries values above the one
    before it, so every subset comes out once instead of r! times.
    """

    def __init__(self, low: int, high: int, r: int, ascending: bool = False) -> None:
        self.lowest = low
        self.pool = high - low + 1
        self.r = r
        self.ascending = ascending
        self.seq: List[int] = [0] * r
        self.used: List[bool] = [False] * self.pool
        self.out: List[Selection] = []

    def run(self, depth: int = 0) -> None:
        if depth == self.r:
            self.out.append(tuple(self.seq))
            return
        first = 0
        if self.ascending and depth > 0:
            first = self.seq[depth - 1] - self.lowest + 1
        for i in range(first, self.pool):
            if self.used[i]:
                continue
            self.seq[depth] = i + self.lowest
            self.used[i] = True
            self.run(depth + 1)
            self.seq[depth] = 0
            self.used[i] = False


def _generate(low: int, high: int, r: int, ascending: bool) -> List[Selection]:
    pool = high - low + 1
    if r < 0 or r > max(pool, 0):
        raise ValueError(f"cannot select {r} values from [{low}, {high}]")
    p = _Permuter(low, high, r, ascending)
    p.run()
    return p.out


def permute(low: int, high: int, r: int) -> List[Selection]:
    """Return every ordered selection of r distinct integers in [low, high].

    Output order is deterministic, lowest available value first.
    """
    return _generate(low, high, r, ascending=False)


def permute_n(n: int) -> List[Selection]:
    return permute(1, n, n)


def subsets(low: int, high: int, r: int) -> List[Selection]:
    """Each size-r subset of [low, high] once, as an ascending tuple."""
    return _generate(low, high, r, ascending=True)
