from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from board_text import (
    format_board,
    format_candidates,
    format_line_perms,
    model_from_file,
    puzzle_to_dict,
)
from model import ConfigurationError, PuzzleModel
from solver import SkyscraperSolver, SolverResult


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="skyscraper",
        description="Solve a skyscraper puzzle by deduction alone (no guessing).",
    )
    ap.add_argument("puzzle", help="Puzzle file: bordered text, or .json.")
    ap.add_argument("--json-out", help="Write the final board and status as JSON.")
    ap.add_argument(
        "--candidates",
        action="store_true",
        help="Print every cell's remaining candidates after solving.",
    )
    ap.add_argument(
        "--perms",
        action="store_true",
        help="Print the surviving permutations of each clued row.",
    )
    ap.add_argument(
        "--trace", action="store_true", help="Print which rule fired each round."
    )
    return ap


def save_result(path: str, model: PuzzleModel, result: SolverResult) -> None:
    with open(path, "w") as f:
        json.dump(puzzle_to_dict(model, result), f, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        model = model_from_file(args.puzzle)
    except ConfigurationError as e:
        print(f"Bad puzzle: {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"Failed to load puzzle: {e}", file=sys.stderr)
        return 2

    print(format_board(model))
    print(f"After init, {model.num_empty} empty cells")
    solver = SkyscraperSolver(model)
    result = solver.solve(logger=print if args.trace else None)

    if args.perms:
        print(format_line_perms(model))
    if args.candidates:
        print(format_candidates(model))
    check = model.solved()
    print(f"Board:\n{format_board(model)}\nEmpty {model.num_empty}")
    print(f"Solved: {check.message}")
    print(f"{result.message} ({result.duration_ms} ms)")

    if args.json_out:
        try:
            save_result(args.json_out, model, result)
        except OSError as e:
            print(f"Failed to save result: {e}", file=sys.stderr)
            return 2
    return 0 if result.status == "solved" else 1


if __name__ == "__main__":
    sys.exit(main())
