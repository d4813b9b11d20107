# builder.py
# Builds the toroidal column/row mesh the search runs on

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

from dlx import (
    Board,
    Node,
    NodeKind,
    StructureError,
    iterate_vertical_except,
    relink_horizontal,
    relink_vertical,
)

logger = logging.getLogger(__name__)


class Column(NamedTuple):
    head: int
    nodes: List[int]


def create_board_head() -> Board:
    return Board()


def create_column(board: Board, ident: int, row_count: int, label: Optional[str] = None) -> Column:
    """
    Allocate a column header with ``row_count`` data nodes hanging below it.

    The nodes get ids 0..row_count-1 in top to bottom order. The header is
    not linked into the board yet; see ``append_columns``.
    """
    head = board.add(Node(NodeKind.COLUMN, ident, label))
    header = board[head]
    header.column = head
    header.left = header.right = head
    header.up = header.down = head

    nodes: List[int] = []
    last = head
    for i in range(row_count):
        index = board.add(Node(NodeKind.DATA, i, column=head))
        node = board[index]
        node.up = last
        node.down = board[last].down
        node.left = node.right = index
        relink_vertical(board, index)
        nodes.append(index)
        last = index

    if header.size != row_count:
        raise StructureError(
            f"Relinking nodes produced incorrect size: {header.size} (requested: {row_count})"
        )
    if list(iterate_vertical_except(board, head)) != nodes:
        raise StructureError(f"Column {ident}: constructed and discovered nodes don't match")
    return Column(head, nodes)


def append_columns(board: Board, heads: Sequence[int]) -> None:
    for head in heads:
        # Insert just left of the root so the column becomes last in the ring.
        header = board[head]
        header.left = board[Board.ROOT].left
        header.right = Board.ROOT
        relink_horizontal(board, head)


def prepend_node(board: Board, existing: int, new: int) -> None:
    node = board[new]
    node.left = board[existing].left
    node.right = existing
    relink_horizontal(board, new)


def link_row(board: Board, nodes: Sequence[int]) -> int:
    """Thread ``nodes`` into one row ring, keeping their order going right."""
    first = nodes[0]
    for index in nodes[1:]:
        prepend_node(board, first, index)
    return first


def build_board(
    num_columns: int,
    rows: Sequence[Sequence[int]],
    labels: Optional[Sequence[str]] = None,
) -> Tuple[Board, List[List[int]]]:
    """
    Build a complete board from a sparse row description.

    Each row lists the column indices it covers. Returns the board and, for
    every row, its data-node indices in the order the columns were given.
    """
    counts = [0] * num_columns
    for row_id, cols in enumerate(rows):
        if len(set(cols)) != len(cols):
            raise ValueError(f"Row {row_id} mentions a column more than once")
        for c in cols:
            if not 0 <= c < num_columns:
                raise ValueError(f"Row {row_id} refers to column {c} (have {num_columns})")
            counts[c] += 1

    board = create_board_head()
    columns = [
        create_column(board, c, counts[c], labels[c] if labels else None)
        for c in range(num_columns)
    ]
    append_columns(board, [col.head for col in columns])

    # Hand out each column's nodes top to bottom as rows claim them.
    used = [0] * num_columns
    row_nodes: List[List[int]] = []
    for cols in rows:
        members = []
        for c in cols:
            members.append(columns[c].nodes[used[c]])
            used[c] += 1
        if members:
            link_row(board, members)
        row_nodes.append(members)

    logger.debug("Built board with %d columns and %d rows", num_columns, len(rows))
    return board, row_nodes
