# solver.py
# Combines everything; solves a sudoku given as a grid of clues

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from dlx import Board
from search import SearchStats, cover, deselect, exact_cover_solve, select, uncover
from sudoku import (
    BOX_WIDTH,
    Grid,
    SudokuMatrix,
    grid_from_solution,
    populate_sudoku_matrix,
    related_answers,
)

logger = logging.getLogger(__name__)


def build_exact_cover(box_width: int = BOX_WIDTH) -> SudokuMatrix:
    return populate_sudoku_matrix(box_width)


def deadline(seconds: float) -> Callable[[], bool]:
    """A ``should_stop`` hook that trips once ``seconds`` have passed."""
    stop_at = time.monotonic() + seconds
    return lambda: time.monotonic() >= stop_at


def _is_live_column(board: Board, head: int) -> bool:
    return board[board[head].left].right == head


def _is_live_node(board: Board, node: int) -> bool:
    return board[board[node].up].down == node


def apply_clues(matrix: SudokuMatrix, grid: Grid) -> List[int]:
    """
    Commit every given value as if the search had chosen it.

    Returns the committed row nodes; pass them to ``release_clues`` to undo.
    Raises ValueError for a malformed grid or clues that contradict each
    other, leaving the board untouched.
    """
    n = matrix.geometry.size
    if len(grid) != n or any(len(row) != n for row in grid):
        raise ValueError(f"Expected a {n}x{n} grid")

    board = matrix.board
    committed: List[int] = []
    for r, row in enumerate(grid):
        for c, v in enumerate(row):
            if not v:
                continue
            if not 1 <= v <= n:
                release_clues(matrix, committed)
                raise ValueError(f"Clue {v} at ({r},{c}) is out of range 1..{n}")
            cell = related_answers(matrix.geometry, r, c, v - 1)[0]
            head = matrix.columns[cell.criteria_id].head
            node = matrix.node(cell.criteria_id, cell.node_id)
            if not (_is_live_column(board, head) and _is_live_node(board, node)):
                release_clues(matrix, committed)
                raise ValueError(f"Clue {v} at ({r},{c}) conflicts with another clue")
            cover(board, head)
            select(board, node)
            committed.append(node)
    return committed


def release_clues(matrix: SudokuMatrix, committed: List[int]) -> None:
    board = matrix.board
    for node in reversed(committed):
        deselect(board, node)
        uncover(board, board[node].column)


def solve_sudoku(
    grid: Optional[Grid] = None,
    box_width: int = BOX_WIDTH,
    should_stop: Optional[Callable[[], bool]] = None,
    matrix: Optional[SudokuMatrix] = None,
    stats: Optional[SearchStats] = None,
) -> Optional[Grid]:
    """
    Fill in ``grid`` (0 for blanks; None for an empty puzzle).

    Returns the completed grid, or None if the clues admit no solution or the
    search was stopped; pass ``stats`` and check ``stats.cancelled`` to tell
    the two apart. A ``matrix`` may be passed in to reuse a built board;
    it is left as it was found.
    """
    if matrix is None:
        matrix = build_exact_cover(box_width)
    n = matrix.geometry.size
    if grid is None:
        grid = [[0] * n for _ in range(n)]

    committed = apply_clues(matrix, grid)
    try:
        if matrix.board.is_empty():
            return grid_from_solution(matrix, committed)
        found = exact_cover_solve(matrix.board, should_stop=should_stop, stats=stats)
        if not found:
            return None
        logger.debug("Filled %d cells on top of %d clues", len(found), len(committed))
        return grid_from_solution(matrix, committed + found)
    finally:
        release_clues(matrix, committed)
