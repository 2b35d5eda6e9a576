from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

Cell = Tuple[int, int]
Grid = List[List[int]]

ROW = "row"
COL = "col"
FWD = "fwd"
BWD = "bwd"

AXES = (ROW, COL)
DIRECTIONS = (FWD, BWD)


def visible_count(values: Iterable[int]) -> int:
    """Count the values that exceed every value scanned before them.

    Empty cells (0) never become a new maximum, so a partially filled line
    can be scanned, but the count only means something once it is complete.
    """
    vis = 0
    highest = 0
    for val in values:
        if val > highest:
            highest = val
            vis += 1
    return vis


@dataclass(frozen=True)
class Observer:
    """A visibility clue looking along one row or column from one end.

    ``fwd`` observers look toward increasing indices (left to right, top to
    bottom), ``bwd`` observers toward decreasing ones.
    """

    axis: str
    index: int
    direction: str
    count: int

    def cells(self, size: int) -> List[Cell]:
        """Cells of the observed line, in the order the observer scans them."""
        order = range(size) if self.direction == FWD else range(size - 1, -1, -1)
        if self.axis == ROW:
            return [(self.index, c) for c in order]
        return [(r, self.index) for r in order]

    def is_satisfied(self, grid: Grid) -> bool:
        return observer_satisfied(self, grid)

    def __str__(self) -> str:
        out = f"{self.axis} {self.index}"
        if self.direction == BWD:
            out += " bwd"
        return out + f" sees {self.count}"


def _scan_fits(values: Iterable[int], count: int) -> bool:
    vis = 0
    highest = 0
    for val in values:
        if val > highest:
            highest = val
            vis += 1
            if vis > count:
                return False
    return vis == count


def fits(
    perm: Sequence[int],
    fwd: Optional[Observer] = None,
    bwd: Optional[Observer] = None,
) -> bool:
    """Check a candidate line against the observers at either end.

    A missing observer leaves that end unconstrained, so
    ``fits(perm, None, None)`` is always True.
    """
    if fwd is not None and not _scan_fits(perm, fwd.count):
        return False
    if bwd is not None and not _scan_fits(reversed(perm), bwd.count):
        return False
    return True


def observer_satisfied(observer: Observer, grid: Grid) -> bool:
    size = len(grid)
    values = [grid[r][c] for r, c in observer.cells(size)]
    return visible_count(values) == observer.count


def perms_for_observers(
    perms: Sequence[Sequence[int]],
    fwd: Optional[Observer],
    bwd: Optional[Observer],
) -> Optional[List[int]]:
    """Indices into ``perms`` of the lines both observers accept.

    Returns None when the line has no observer at all.
    """
    if fwd is None and bwd is None:
        return None
    return [i for i, perm in enumerate(perms) if fits(perm, fwd, bwd)]
