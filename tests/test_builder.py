import pytest

import builder
from builder import (
    append_columns,
    build_board,
    create_board_head,
    create_column,
    link_row,
    prepend_node,
)
from dlx import (
    Board,
    NodeKind,
    StructureError,
    check_rings,
    iterate_horizontal,
    iterate_vertical_except,
)


def test_create_column_links_nodes_in_order():
    board = create_board_head()
    col = create_column(board, 7, 4, "seven")

    header = board[col.head]
    assert header.kind is NodeKind.COLUMN
    assert header.ident == 7
    assert header.label == "seven"
    assert header.size == 4
    assert list(iterate_vertical_except(board, col.head)) == col.nodes
    assert [board[n].ident for n in col.nodes] == [0, 1, 2, 3]
    assert all(board[n].column == col.head for n in col.nodes)
    # Not part of the board until appended.
    assert board.is_empty()


def test_create_column_without_rows():
    board = create_board_head()
    col = create_column(board, 0, 0)
    assert col.nodes == []
    assert board[col.head].size == 0


def test_create_column_rejects_broken_relink(monkeypatch):
    monkeypatch.setattr(builder, "relink_vertical", lambda board, index: index)
    board = create_board_head()
    with pytest.raises(StructureError, match="incorrect size"):
        create_column(board, 0, 3)


def test_append_columns_keeps_given_order():
    board = create_board_head()
    first = [create_column(board, i, 1).head for i in range(2)]
    append_columns(board, first)
    second = [create_column(board, i, 1).head for i in range(2, 4)]
    append_columns(board, second)
    assert board.columns() == first + second
    assert board[Board.ROOT].left == second[-1]


def test_prepend_node_inserts_to_the_left():
    board = create_board_head()
    a, b, c = (create_column(board, i, 1).nodes[0] for i in range(3))
    prepend_node(board, a, b)
    prepend_node(board, a, c)
    assert list(iterate_horizontal(board, a)) == [a, b, c]
    assert board[a].left == c


def test_link_row_preserves_order():
    board = create_board_head()
    nodes = [create_column(board, i, 1).nodes[0] for i in range(4)]
    assert link_row(board, nodes) == nodes[0]
    assert list(iterate_horizontal(board, nodes[0])) == nodes
    assert list(iterate_horizontal(board, nodes[2])) == nodes[2:] + nodes[:2]


def test_build_board_sizes_and_rows():
    board, rows = build_board(3, [[0, 1], [1, 2], [2]], labels=["a", "b", "c"])
    heads = board.columns()
    assert [board[h].label for h in heads] == ["a", "b", "c"]
    assert [board[h].size for h in heads] == [1, 2, 2]
    assert [len(r) for r in rows] == [2, 2, 1]
    assert list(iterate_horizontal(board, rows[1][0])) == rows[1]
    assert [board[board[n].column].ident for n in rows[1]] == [1, 2]
    check_rings(board)


def test_build_board_rejects_bad_rows():
    with pytest.raises(ValueError):
        build_board(2, [[0, 2]])
    with pytest.raises(ValueError):
        build_board(2, [[1, 1]])
