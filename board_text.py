from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from constraints import BWD, COL, FWD, ROW
from model import PuzzleModel

Bordered = List[List[int]]


def char_to_int(ch: str) -> int:
    """'1'-'9' map to 1-9, 'a'-'z' to 10-35, anything else to 0."""
    if "1" <= ch <= "9":
        return ord(ch) - ord("0")
    if "a" <= ch <= "z":
        return ord(ch) - ord("a") + 10
    return 0


def int_to_char(n: int) -> str:
    if n > 9:
        return chr(ord("a") + n - 10)
    return chr(ord("0") + n)


def parse_bordered(text: str) -> Bordered:
    """Turn puzzle text into the (N+2)x(N+2) integer grid.

    Blank lines are dropped and short lines are padded with 0, so trailing
    blanks (absent clues) may be omitted.
    """
    lines = [line.rstrip("\r\n") for line in text.split("\n")]
    lines = [line for line in lines if line]
    if len(lines) < 3:
        raise ValueError(f"puzzle needs at least 3 lines; got {len(lines)}")
    width = len(lines)
    bordered: Bordered = [[0] * width for _ in range(width)]
    for r, line in enumerate(lines):
        if len(line) > width:
            raise ValueError(f"line {r + 1} is {len(line)} wide; need {width}")
        for c, ch in enumerate(line):
            bordered[r][c] = char_to_int(ch)
    size = width - 2
    for r in range(1, size + 1):
        for c in range(1, size + 1):
            if bordered[r][c] > size:
                raise ValueError(
                    f"cell r{r}c{c} holds {bordered[r][c]}; max is {size}"
                )
    return bordered


def model_from_string(text: str) -> PuzzleModel:
    return PuzzleModel(parse_bordered(text))


def model_from_file(path: str) -> PuzzleModel:
    with open(path, "r") as f:
        data = f.read()
    if path.endswith(".json"):
        return PuzzleModel(bordered_from_dict(json.loads(data)))
    return model_from_string(data)


def _clue_char(model: PuzzleModel, axis: str, index: int, direction: str) -> str:
    obs = model.observer_at(axis, index, direction)
    return " " if obs is None else int_to_char(obs.count)


def format_board(model: PuzzleModel) -> str:
    """Render clues and values in the same bordered layout the parser reads."""
    n = model.size
    lines = [" " + "".join(_clue_char(model, COL, c, FWD) for c in range(n)) + " "]
    for r in range(n):
        lines.append(
            _clue_char(model, ROW, r, FWD)
            + "".join(int_to_char(model.get_value(r, c)) for c in range(n))
            + _clue_char(model, ROW, r, BWD)
        )
    lines.append(" " + "".join(_clue_char(model, COL, c, BWD) for c in range(n)) + " ")
    return "\n".join(lines)


def format_candidates(model: PuzzleModel) -> str:
    out = []
    for r in range(model.size):
        out.append(f"Row {r}")
        for c in range(model.size):
            vals = " ".join(str(v) for v in model.candidates(r, c))
            out.append(f"{c}: {vals}")
    return "\n".join(out)


def format_line_perms(model: PuzzleModel) -> str:
    out = []
    for r, indices in enumerate(model.row_perms):
        if indices is None:
            continue
        out.append(f"Row {r} perms:")
        for pi in indices:
            out.append(" ".join(str(v) for v in model.perms[pi]))
    return "\n".join(out)


# ---- JSON ----------------------------------------------------------------


def _clue_list(model: PuzzleModel, axis: str, direction: str) -> List[int]:
    out = []
    for i in range(model.size):
        obs = model.observer_at(axis, i, direction)
        out.append(0 if obs is None else obs.count)
    return out


def puzzle_to_dict(model: PuzzleModel, result: Optional[Any] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "version": 1,
        "size": model.size,
        "clues": {
            "top": _clue_list(model, COL, FWD),
            "bottom": _clue_list(model, COL, BWD),
            "left": _clue_list(model, ROW, FWD),
            "right": _clue_list(model, ROW, BWD),
        },
        "grid": model.copy_grid(),
    }
    if result is not None:
        data["status"] = result.status
        data["message"] = result.message
    return data


def _entries(vals: Any, size: int, what: str) -> List[int]:
    """Validate one clue list or grid row: ``size`` integers in 0..size."""
    if not isinstance(vals, list) or len(vals) != size:
        raise ValueError(f"Invalid {what}")
    out = []
    for v in vals:
        try:
            n = int(v) if v else 0
        except (TypeError, ValueError):
            raise ValueError(f"Invalid {what}: {v!r}") from None
        if not 0 <= n <= size:
            raise ValueError(f"Invalid {what}: {n} outside 0..{size}")
        out.append(n)
    return out


def bordered_from_dict(data: Any) -> Bordered:
    if not isinstance(data, dict):
        raise ValueError("Invalid puzzle document")
    size = data.get("size")
    if not isinstance(size, int) or size < 1:
        raise ValueError("Invalid size")
    clues = data.get("clues") or {}
    if not isinstance(clues, dict):
        raise ValueError("Invalid clues")

    def clue_row(key: str) -> List[int]:
        return _entries(clues.get(key) or [0] * size, size, f"{key} clues")

    grid = data.get("grid") or [[0] * size for _ in range(size)]
    if not isinstance(grid, list) or len(grid) != size:
        raise ValueError("Invalid grid")
    top, bottom = clue_row("top"), clue_row("bottom")
    left, right = clue_row("left"), clue_row("right")
    bordered: Bordered = [[0] + top + [0]]
    for r in range(size):
        cells = _entries(grid[r], size, f"grid row {r}")
        bordered.append([left[r]] + cells + [right[r]])
    bordered.append([0] + bottom + [0])
    return bordered
