# search.py
# Algorithm X over a dancing-links board

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from dlx import (
    Axis,
    Board,
    RingCursor,
    check_rings,
    iterate_horizontal_except,
    iterate_vertical_except,
    relink_horizontal,
    relink_vertical,
    unlink_horizontal,
    unlink_vertical,
)

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    calls: int = 0
    covers: int = 0
    selections: int = 0
    backtracks: int = 0
    max_depth: int = 0
    cancelled: bool = False


def cover(board: Board, column: int) -> None:
    # The constraint is claimed: drop it from the open columns...
    unlink_horizontal(board, column)
    # ...and pull every row that also satisfies it out of the other columns.
    for row in iterate_vertical_except(board, column):
        for neighbour in iterate_horizontal_except(board, row):
            unlink_vertical(board, neighbour)


def uncover(board: Board, column: int) -> None:
    # Exact mirror of cover: bottom to top, right to left.
    for row in RingCursor(board, column, Axis.UPWARD):
        for neighbour in RingCursor(board, row, Axis.LEFTWARD):
            relink_vertical(board, neighbour)
    relink_horizontal(board, column)


def select(board: Board, row: int) -> None:
    """Commit ``row``: every other constraint it satisfies becomes covered."""
    for node in iterate_horizontal_except(board, row):
        cover(board, board[node].column)


def deselect(board: Board, row: int) -> None:
    for node in RingCursor(board, row, Axis.LEFTWARD):
        uncover(board, board[node].column)


def choose_column(board: Board) -> Optional[int]:
    """
    Column with the fewest live rows, first one wins on ties.

    Returns None when some open column has no rows left (dead end) or when
    there are no open columns at all.
    """
    best: Optional[int] = None
    best_size = 0
    for column in iterate_horizontal_except(board, Board.ROOT):
        size = board[column].size
        if size == 0:
            return None
        if best is None or size < best_size:
            best = column
            best_size = size
    return best


def _ensure_recursion_limit(board: Board) -> None:
    needed = len(board.columns()) + 100
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


def exact_cover_solve(
    board: Board,
    *,
    should_stop: Optional[Callable[[], bool]] = None,
    keep_covered: bool = False,
    stats: Optional[SearchStats] = None,
    debug: bool = False,
) -> List[int]:
    """
    Find the first exact cover of ``board``.

    Returns the selected data nodes in the order they were committed, or an
    empty list when the board has no solution or ``should_stop`` tripped.

    By default the board is fully restored before returning. With
    ``keep_covered`` the winning path is left covered, so the board's column
    ring is empty on return; ``release_solution`` puts it back.
    """
    stats = stats if stats is not None else SearchStats()
    answer: List[int] = []
    found: List[int] = []
    _ensure_recursion_limit(board)

    def recursive_solve(depth: int) -> bool:
        stats.calls += 1
        stats.max_depth = max(stats.max_depth, depth)
        if should_stop is not None and should_stop():
            stats.cancelled = True
            return False

        if board.is_empty():
            found.extend(answer)
            return True

        target = choose_column(board)
        if target is None:
            return False

        cover(board, target)
        stats.covers += 1
        solved = False
        for node in iterate_vertical_except(board, target):
            select(board, node)
            answer.append(node)
            stats.selections += 1
            solved = recursive_solve(depth + 1)
            if solved and keep_covered:
                return True
            deselect(board, node)
            answer.pop()
            if solved or stats.cancelled:
                break
        uncover(board, target)
        if not solved:
            stats.backtracks += 1
        return solved

    solved = recursive_solve(0)

    if stats.cancelled:
        logger.warning("Search cancelled after %d steps", stats.calls)
    elif not solved:
        logger.warning("No exact cover exists (%d steps)", stats.calls)
    else:
        logger.debug(
            "Found cover with %d rows: %d steps, %d backtracks, depth %d",
            len(found), stats.calls, stats.backtracks, stats.max_depth,
        )
    if debug:
        check_rings(board)
    return found


def release_solution(board: Board, solution: List[int]) -> None:
    """Undo a search run with ``keep_covered``, last commitment first."""
    for node in reversed(solution):
        deselect(board, node)
        uncover(board, board[node].column)


def solve_steps(board: Board) -> Iterator[Dict[str, Any]]:
    """
    Generator that yields events describing the solving process.
    Events are dicts with 'type', 'data' and 'state' (the selected nodes so
    far). Stops after the first solution; the board is restored once the
    generator finishes or is closed.
    """
    solution: List[int] = []

    def get_state():
        return list(solution)

    def search(depth=0):
        if board.is_empty():
            yield {
                "type": "SOLUTION",
                "data": {"solution": get_state()},
                "state": get_state(),
            }
            return True

        candidates = [
            {"column": c, "label": board.describe(c), "size": board[c].size}
            for c in iterate_horizontal_except(board, Board.ROOT)
        ]
        column = choose_column(board)
        if column is None:
            empty = next(c for c in candidates if c["size"] == 0)
            yield {
                "type": "BACKTRACK",
                "data": {
                    "column": empty["column"],
                    "reason": f"{empty['label']} has no options left.",
                },
                "state": get_state(),
            }
            return False

        yield {
            "type": "CHOOSE_COL",
            "data": {
                "chosen": column,
                "label": board.describe(column),
                "size": board[column].size,
                "candidates": candidates,
                "reason": f"{board.describe(column)} has the fewest options ({board[column].size}).",
            },
            "state": get_state(),
        }

        cover(board, column)
        try:
            yield {"type": "COVER_COL", "data": {"column": column}, "state": get_state()}
            for node in iterate_vertical_except(board, column):
                solution.append(node)
                select(board, node)
                try:
                    yield {
                        "type": "SELECT_ROW",
                        "data": {"row": node, "column": column},
                        "state": get_state(),
                    }
                    if (yield from search(depth + 1)):
                        return True
                finally:
                    deselect(board, node)
                    solution.pop()
                yield {"type": "UNSELECT_ROW", "data": {"row": node}, "state": get_state()}
        finally:
            uncover(board, column)

        yield {"type": "UNCOVER_COL", "data": {"column": column}, "state": get_state()}
        if depth > 0:
            yield {
                "type": "BACKTRACK",
                "data": {
                    "column": column,
                    "reason": "Tried all options for this column, going back.",
                },
                "state": get_state(),
            }
        return False

    _ensure_recursion_limit(board)
    yield {"type": "INIT", "data": {"columns": len(board.columns())}, "state": []}
    yield from search()
