from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from constraints import (
    BWD,
    COL,
    FWD,
    ROW,
    Observer,
    perms_for_observers,
)
from perm import Selection, permute_n

Grid = List[List[int]]
PermList = Optional[List[int]]

EMPTY = 0


class ConfigurationError(ValueError):
    """Raised when a puzzle declares two clues for the same line end."""


@dataclass
class SolvedCheck:
    status: str
    message: str = ""
    observer: Optional[Observer] = None

    @property
    def ok(self) -> bool:
        return self.status == "solved"

    def __bool__(self) -> bool:
        return self.ok


class PuzzleModel:
    """Grid, candidate sets, clues and surviving line permutations.

    Built from the bordered (N+2)x(N+2) integer grid: the first and last
    rows hold column clues, the first and last columns of the interior rows
    hold row clues, corners are ignored and the interior holds givens.
    """

    def __init__(self, bordered: Sequence[Sequence[int]]) -> None:
        if len(bordered) < 3:
            raise ValueError("bordered grid needs at least 3 rows")
        self.size = len(bordered) - 2
        n = self.size
        self.grid: Grid = [[EMPTY for _ in range(n)] for _ in range(n)]
        self.allowed: List[List[Set[int]]] = [
            [set(range(1, n + 1)) for _ in range(n)] for _ in range(n)
        ]
        self.num_empty = n * n
        self.observers: List[Observer] = []
        self._slots: Dict[Tuple[str, int, str], Observer] = {}
        self.perms: List[Selection] = []
        self.row_perms: List[PermList] = [None] * n
        self.col_perms: List[PermList] = [None] * n

        for r, row in enumerate(bordered):
            if len(row) != n + 2:
                raise ValueError(f"row {r} has {len(row)} entries; need {n + 2}")
            for c, val in enumerate(row):
                top_or_bottom = r == 0 or r == n + 1
                left_or_right = c == 0 or c == n + 1
                if top_or_bottom and left_or_right:
                    continue
                if top_or_bottom:
                    direction = FWD if r == 0 else BWD
                    self.add_observer(Observer(COL, c - 1, direction, val))
                elif left_or_right:
                    direction = FWD if c == 0 else BWD
                    self.add_observer(Observer(ROW, r - 1, direction, val))
                else:
                    self.mark(r - 1, c - 1, val)

        self.perms = permute_n(n)
        self._populate_line_perms()
        # Local import: solver depends on this module.
        from solver import (
            narrow_candidates_from_permutations,
            narrow_permutations_from_candidates,
        )

        narrow_permutations_from_candidates(self)
        narrow_candidates_from_permutations(self)

    # ---- clues -----------------------------------------------------------

    def add_observer(self, observer: Observer) -> None:
        if observer.count == 0:
            return
        key = (observer.axis, observer.index, observer.direction)
        existing = self._slots.get(key)
        if existing is not None:
            raise ConfigurationError(
                f"observer {observer} would replace observer {existing}"
            )
        self._slots[key] = observer
        self.observers.append(observer)

    def observer_at(self, axis: str, index: int, direction: str) -> Optional[Observer]:
        return self._slots.get((axis, index, direction))

    def line_observers(
        self, axis: str, index: int
    ) -> Tuple[Optional[Observer], Optional[Observer]]:
        return self.observer_at(axis, index, FWD), self.observer_at(axis, index, BWD)

    def _populate_line_perms(self) -> None:
        for i in range(self.size):
            fwd, bwd = self.line_observers(ROW, i)
            self.row_perms[i] = perms_for_observers(self.perms, fwd, bwd)
        for i in range(self.size):
            fwd, bwd = self.line_observers(COL, i)
            self.col_perms[i] = perms_for_observers(self.perms, fwd, bwd)

    # ---- grid ------------------------------------------------------------

    def get_value(self, row: int, col: int) -> int:
        return self.grid[row][col]

    def set_value(self, row: int, col: int, value: int) -> bool:
        """Write a cell and keep ``num_empty`` current. Candidates are untouched."""
        prev = self.grid[row][col]
        if prev == value:
            return False
        if prev != EMPTY and value == EMPTY:
            self.num_empty += 1
        elif prev == EMPTY and value != EMPTY:
            self.num_empty -= 1
        self.grid[row][col] = value
        return True

    def mark(self, row: int, col: int, value: int) -> Tuple[bool, bool]:
        """Decide a cell.

        Returns (changed, neighbor_affected): whether the cell changed, and
        whether ``value`` was removed from another cell in its row or column.
        """
        if not self.set_value(row, col, value):
            return False, False
        neighbor_affected = False
        for i in range(self.size):
            if i != row and value in self.allowed[i][col]:
                self.allowed[i][col].discard(value)
                neighbor_affected = True
            if i != col and value in self.allowed[row][i]:
                self.allowed[row][i].discard(value)
                neighbor_affected = True
        self.allowed[row][col] = {value}
        return True, neighbor_affected

    def copy_grid(self) -> Grid:
        return [row[:] for row in self.grid]

    # ---- candidates ------------------------------------------------------

    def is_allowed(self, row: int, col: int, value: int) -> bool:
        return value in self.allowed[row][col]

    def candidates(self, row: int, col: int) -> List[int]:
        return sorted(self.allowed[row][col])

    def disallow_all(self, row: int, col: int, values: Iterable[int]) -> bool:
        """Remove every value in ``values`` from a cell's candidates."""
        cell = self.allowed[row][col]
        before = len(cell)
        cell.difference_update(values)
        return len(cell) != before

    def disallow_others(self, row: int, col: int, keep: Iterable[int]) -> bool:
        """Remove every candidate not in ``keep``."""
        cell = self.allowed[row][col]
        before = len(cell)
        cell.intersection_update(keep)
        return len(cell) != before

    # ---- status ----------------------------------------------------------

    def solved(self) -> SolvedCheck:
        """Check completion and clues; row/column uniqueness is not re-checked."""
        if self.num_empty != 0:
            return SolvedCheck(
                status="incomplete",
                message=f"grid has {self.num_empty} empty cells; need 0",
            )
        for observer in self.observers:
            if not observer.is_satisfied(self.grid):
                return SolvedCheck(
                    status="observer-unsatisfied",
                    message=f"observer {observer} unsatisfied",
                    observer=observer,
                )
        return SolvedCheck(status="solved", message="all observers satisfied")

    def has_contradiction(self) -> bool:
        if any(not cell for row in self.allowed for cell in row):
            return True
        return any(
            lp is not None and not lp for lp in self.row_perms + self.col_perms
        )
