# sudoku.py
# Sudoku as an exact cover problem: criteria ids, labels and row threading

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional

from builder import Column, append_columns, create_board_head, create_column, prepend_node
from dlx import Board

logger = logging.getLogger(__name__)

# The board can be expanded, but its size must be based on a single square.
BOX_WIDTH = 3
# Constant for all standard sudoku
CRITERIA_TYPES = 4

DIGITS = "123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
BLANKS = "0."

Grid = List[List[int]]


class CriteriaType(IntEnum):
    CELL_FILLED = 0
    ROW_HAS_VALUE = 1
    COL_HAS_VALUE = 2
    BOX_HAS_VALUE = 3


@dataclass(frozen=True)
class Geometry:
    box_width: int = BOX_WIDTH

    @property
    def size(self) -> int:
        # Rows, columns, boxes and valid numbers all share this count.
        return self.box_width * self.box_width

    @property
    def num_cells(self) -> int:
        return self.size * self.size

    @property
    def num_criteria(self) -> int:
        return self.num_cells * CRITERIA_TYPES

    @property
    def num_possibilities(self) -> int:
        return self.num_cells * self.size


@dataclass(frozen=True)
class Criteria:
    criteria_id: int
    type: CriteriaType
    row: Optional[int] = None
    column: Optional[int] = None
    box: Optional[int] = None
    value: Optional[int] = None


@dataclass(frozen=True)
class Answer:
    """One possibility (row, column, value) as seen from a single criterion."""
    criteria_id: int
    node_id: int
    type: CriteriaType
    row: int
    column: int
    value: int
    box: int
    box_position: int


@dataclass
class SudokuMatrix:
    geometry: Geometry
    board: Board
    columns: List[Column]

    def node(self, criteria_id: int, node_id: int) -> int:
        return self.columns[criteria_id].nodes[node_id]


def box_indices(geometry: Geometry, row: int, column: int) -> tuple[int, int]:
    #  0   1   2
    #  3   4   5
    #  6   7   8
    w = geometry.box_width
    box = (row // w) * w + column // w
    # Position within the box, same numbering.
    position = (row % w) * w + column % w
    return box, position


def criteria_from_id(geometry: Geometry, criteria_id: int) -> Criteria:
    if not 0 <= criteria_id < geometry.num_criteria:
        raise ValueError(f"Invalid criteria id {criteria_id} (have {geometry.num_criteria})")
    n = geometry.size
    kind, pos = divmod(criteria_id, geometry.num_cells)
    ctype = CriteriaType(kind)
    major, minor = divmod(pos, n)
    if ctype is CriteriaType.CELL_FILLED:
        return Criteria(criteria_id, ctype, row=major, column=minor)
    if ctype is CriteriaType.ROW_HAS_VALUE:
        return Criteria(criteria_id, ctype, row=major, value=minor)
    if ctype is CriteriaType.COL_HAS_VALUE:
        return Criteria(criteria_id, ctype, column=major, value=minor)
    return Criteria(criteria_id, ctype, box=major, value=minor)


def criteria_id(geometry: Geometry, ctype: CriteriaType, major: int, minor: int) -> int:
    """Column id of a criterion; (major, minor) as in ``criteria_from_id``."""
    return ctype * geometry.num_cells + major * geometry.size + minor


def readable_criteria(criteria: Criteria) -> str:
    if criteria.type is CriteriaType.CELL_FILLED:
        return f"Cell({criteria.row},{criteria.column})"
    if criteria.type is CriteriaType.ROW_HAS_VALUE:
        return f"Row({criteria.row}):{criteria.value}"
    if criteria.type is CriteriaType.COL_HAS_VALUE:
        return f"Col({criteria.column}):{criteria.value}"
    return f"Box({criteria.box}):{criteria.value}"


def readable_answer(answer: Answer) -> str:
    if answer.type is CriteriaType.CELL_FILLED:
        return f"Cell({answer.row},{answer.column})={answer.value}"
    if answer.type is CriteriaType.ROW_HAS_VALUE:
        return f"Row({answer.row}):{answer.value}@{answer.column}"
    if answer.type is CriteriaType.COL_HAS_VALUE:
        return f"Col({answer.column}):{answer.value}@{answer.row}"
    return f"Box({answer.box}):{answer.value}@{answer.box_position}"


def related_answers(geometry: Geometry, row: int, column: int, value: int) -> List[Answer]:
    """The four criteria satisfied by writing ``value`` at (row, column), cell first."""
    box, position = box_indices(geometry, row, column)

    def answer(ctype: CriteriaType, major: int, minor: int, node_id: int) -> Answer:
        return Answer(
            criteria_id=criteria_id(geometry, ctype, major, minor),
            node_id=node_id,
            type=ctype,
            row=row,
            column=column,
            value=value,
            box=box,
            box_position=position,
        )

    return [
        answer(CriteriaType.CELL_FILLED, row, column, value),
        answer(CriteriaType.ROW_HAS_VALUE, row, value, column),
        answer(CriteriaType.COL_HAS_VALUE, column, value, row),
        answer(CriteriaType.BOX_HAS_VALUE, box, value, position),
    ]


def interpret_node(matrix: SudokuMatrix, node: int) -> Answer:
    geometry = matrix.geometry
    w = geometry.box_width
    data = matrix.board[node]
    criteria = criteria_from_id(geometry, matrix.board[data.column].ident)
    nid = data.ident

    if criteria.type is CriteriaType.CELL_FILLED:
        row, column, value = criteria.row, criteria.column, nid
    elif criteria.type is CriteriaType.ROW_HAS_VALUE:
        row, column, value = criteria.row, nid, criteria.value
    elif criteria.type is CriteriaType.COL_HAS_VALUE:
        row, column, value = nid, criteria.column, criteria.value
    else:
        box = criteria.box
        row = (box // w) * w + nid // w
        column = (box % w) * w + nid % w
        value = criteria.value

    box, position = box_indices(geometry, row, column)
    return Answer(criteria.criteria_id, nid, criteria.type, row, column, value, box, position)


def populate_sudoku_matrix(box_width: int = BOX_WIDTH) -> SudokuMatrix:
    """Build a board with one column per criterion, each with one node per valid number."""
    geometry = Geometry(box_width)
    n = geometry.size

    board = create_board_head()
    columns: List[Column] = []
    for i in range(geometry.num_criteria):
        label = readable_criteria(criteria_from_id(geometry, i))
        columns.append(create_column(board, i, n, label))
    append_columns(board, [c.head for c in columns])

    # Every possibility threads its four nodes into one row:
    # cell -> row -> column -> box -> cell ...
    for r in range(n):
        for c in range(n):
            for v in range(n):
                cell, *others = related_answers(geometry, r, c, v)
                cell_node = columns[cell.criteria_id].nodes[cell.node_id]
                board[cell_node].label = readable_answer(cell)
                for answer in others:
                    node = columns[answer.criteria_id].nodes[answer.node_id]
                    board[node].label = readable_answer(answer)
                    prepend_node(board, cell_node, node)

    logger.debug(
        "Populated %dx%d sudoku matrix: %d criteria, %d possibilities",
        n, n, geometry.num_criteria, geometry.num_possibilities,
    )
    return SudokuMatrix(geometry, board, columns)


def grid_from_solution(matrix: SudokuMatrix, nodes: Iterable[int]) -> Grid:
    """Read a grid (1-based values, 0 for unset) off a set of selected rows."""
    n = matrix.geometry.size
    grid = [[0] * n for _ in range(n)]
    for node in nodes:
        answer = interpret_node(matrix, node)
        grid[answer.row][answer.column] = answer.value + 1
    return grid


def parse_grid(text: str, size: int = BOX_WIDTH * BOX_WIDTH) -> Grid:
    """
    Parse a puzzle written row by row, one character per cell.
    '0' and '.' mark blanks; whitespace is ignored.
    """
    chars = [ch for ch in text if not ch.isspace()]
    if len(chars) != size * size:
        raise ValueError(f"Expected {size * size} cells, got {len(chars)}")
    symbols = DIGITS[:size]
    values = []
    for ch in chars:
        if ch in BLANKS:
            values.append(0)
        elif ch.upper() in symbols:
            values.append(symbols.index(ch.upper()) + 1)
        else:
            raise ValueError(f"Invalid cell {ch!r} for a {size}x{size} grid")
    return [values[i * size:(i + 1) * size] for i in range(size)]


def format_grid(grid: Grid) -> str:
    return "\n".join(
        "".join(DIGITS[v - 1] if v else "." for v in row) for row in grid
    )
