from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Set, Tuple

from constraints import COL, ROW
from model import EMPTY, PuzzleModel
from perm import Selection, subsets

Grid = List[List[int]]
Cell = Tuple[int, int]
Logger = Optional[Callable[[str], None]]


@dataclass
class SolverResult:
    status: str
    solution: Optional[Grid]
    duration_ms: int
    iterations: int = 0
    empty_cells: int = 0
    message: str = ""


def _line_cells(axis: str, index: int, size: int) -> List[Cell]:
    if axis == ROW:
        return [(index, c) for c in range(size)]
    return [(r, index) for r in range(size)]


def _position_support(
    perms: Sequence[Selection], indices: Optional[List[int]], size: int
) -> Optional[List[Set[int]]]:
    """For each position, the values some surviving permutation puts there."""
    if indices is None:
        return None
    support: List[Set[int]] = [set() for _ in range(size)]
    for pi in indices:
        for pos, val in enumerate(perms[pi]):
            support[pos].add(val)
    return support


# ---- propagation ---------------------------------------------------------


def mark_mandatory(model: PuzzleModel) -> bool:
    """Mark every empty cell whose candidate set is a singleton.

    Marking can reduce a neighbour to a singleton, so passes repeat until a
    pass marks nothing that touched another cell.
    """
    changed = False
    redo = True
    while redo:
        redo = False
        for r in range(model.size):
            for c in range(model.size):
                allowed = model.allowed[r][c]
                if len(allowed) != 1 or model.get_value(r, c) != EMPTY:
                    continue
                val = next(iter(allowed))
                ch, nch = model.mark(r, c, val)
                changed = changed or ch
                redo = redo or nch
    return changed


def narrow_candidates_from_permutations(model: PuzzleModel) -> bool:
    """Drop candidates no surviving row or column permutation places there."""
    n = model.size
    row_support = [
        _position_support(model.perms, model.row_perms[i], n) for i in range(n)
    ]
    col_support = [
        _position_support(model.perms, model.col_perms[i], n) for i in range(n)
    ]
    changed = False
    for r in range(n):
        for c in range(n):
            allowed = model.allowed[r][c]
            for val in sorted(allowed):
                rs = row_support[r]
                if rs is not None and val not in rs[c]:
                    allowed.discard(val)
                    changed = True
                    continue
                cs = col_support[c]
                if cs is not None and val not in cs[r]:
                    allowed.discard(val)
                    changed = True
    return changed


def narrow_permutations_from_candidates(model: PuzzleModel) -> bool:
    """Drop line permutations that put a disallowed value in some cell.

    Shrunk lists are replaced, never edited in place. Lines without
    observers (None) are skipped.
    """
    changed = False
    for axis, lines in ((ROW, model.row_perms), (COL, model.col_perms)):
        for i, indices in enumerate(lines):
            if indices is None:
                continue
            cells = _line_cells(axis, i, model.size)
            kept = [
                pi
                for pi in indices
                if all(
                    model.is_allowed(r, c, model.perms[pi][pos])
                    for pos, (r, c) in enumerate(cells)
                )
            ]
            if len(kept) != len(indices):
                lines[i] = kept
                changed = True
    return changed


# ---- pattern heuristics --------------------------------------------------


def _is_naked_set(model: PuzzleModel, cells: Sequence[Cell]) -> bool:
    first = model.allowed[cells[0][0]][cells[0][1]]
    if len(first) != len(cells):
        return False
    for r, c in cells:
        if model.get_value(r, c) != EMPTY:
            return False
        if model.allowed[r][c] != first:
            return False
    return True


def trim_naked_sets(model: PuzzleModel, n: int) -> bool:
    """Eliminate the values of the first productive naked set of size ``n``.

    When ``n`` empty cells of a line share the same ``n`` candidates, those
    values cannot appear anywhere else in the line. Returns as soon as one
    naked set removed something, so the caller re-runs cheaper rules first.
    """
    size = model.size
    index_sets = subsets(0, size - 1, n)
    for axis in (ROW, COL):
        for line in range(size):
            cells = _line_cells(axis, line, size)
            for idxs in index_sets:
                group = [cells[k] for k in idxs]
                if not _is_naked_set(model, group):
                    continue
                locked = set(model.allowed[group[0][0]][group[0][1]])
                changed = False
                for k, (r, c) in enumerate(cells):
                    if k in idxs or model.get_value(r, c) != EMPTY:
                        continue
                    if model.disallow_all(r, c, locked):
                        changed = True
                if changed:
                    return True
    return False


def _found_group_cells(
    model: PuzzleModel, cells: Sequence[Cell], values: Sequence[int]
) -> Optional[List[Cell]]:
    homes = [[cell for cell in cells if model.is_allowed(*cell, v)] for v in values]
    if len(homes[0]) != len(values):
        return None
    if any(h != homes[0] for h in homes[1:]):
        return None
    return homes[0]


def trim_found_groups(model: PuzzleModel, n: int) -> bool:
    """Restrict cells that are the only homes of a group of ``n`` values.

    If ``n`` values can each only go in the same ``n`` cells of a line, those
    cells hold exactly those values. Applies every such restriction found in
    the sweep before returning.
    """
    size = model.size
    changed = False
    for values in subsets(1, size, n):
        for axis in (ROW, COL):
            for line in range(size):
                group = _found_group_cells(
                    model, _line_cells(axis, line, size), values
                )
                if group is None:
                    continue
                for r, c in group:
                    if model.disallow_others(r, c, values):
                        changed = True
    return changed


# ---- driver --------------------------------------------------------------


class SkyscraperSolver:
    def __init__(self, model: PuzzleModel) -> None:
        self.model = model

    def _group_sizes(self) -> range:
        return range(2, self.model.size - 1)

    def step(self, logger: Logger = None) -> bool:
        """Run one round of every rule in priority order; True on progress."""
        model = self.model
        changed = False
        for name, rule in (
            ("MM", mark_mandatory),
            ("TAFP", narrow_candidates_from_permutations),
            ("TPFA", narrow_permutations_from_candidates),
        ):
            if rule(model):
                if logger:
                    logger(name)
                changed = True
        if changed:
            return True
        for name, rule in (
            ("TNS", trim_naked_sets),
            ("TFG", trim_found_groups),
        ):
            for n in self._group_sizes():
                if rule(model, n):
                    if logger:
                        logger(f"{name}({n})")
                    return True
        return False

    def solve(self, logger: Logger = None) -> SolverResult:
        start = time.time()
        model = self.model
        iterations = 0
        print(f"[solver] solve start; {model.num_empty} empty cells")
        while True:
            check = model.solved()
            if check.ok:
                status, message = "solved", "Solved successfully."
                break
            iterations += 1
            if logger:
                logger(f"round {iterations}")
            if not self.step(logger):
                if model.has_contradiction():
                    status = "no-solution"
                    message = "Contradiction in givens or clues."
                else:
                    status = "stalled"
                    message = f"No rule made progress: {check.message}."
                break
        duration_ms = int((time.time() - start) * 1000)
        print(
            f"[solver] solve end in {duration_ms} ms; {status} after {iterations} rounds"
        )
        return SolverResult(
            status=status,
            solution=model.copy_grid(),
            duration_ms=duration_ms,
            iterations=iterations,
            empty_cells=model.num_empty,
            message=message,
        )
