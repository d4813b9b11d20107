import pytest

from dlx import check_rings, iterate_horizontal, to_dense_matrix
from sudoku import (
    CriteriaType,
    Geometry,
    box_indices,
    criteria_from_id,
    criteria_id,
    format_grid,
    grid_from_solution,
    interpret_node,
    parse_grid,
    populate_sudoku_matrix,
    readable_criteria,
    related_answers,
)


@pytest.fixture(scope="module")
def small():
    return populate_sudoku_matrix(box_width=2)


def test_standard_geometry():
    g = Geometry()
    assert g.size == 9
    assert g.num_cells == 81
    assert g.num_criteria == 324
    assert g.num_possibilities == 729


def test_box_indices():
    g = Geometry()
    assert box_indices(g, 0, 0) == (0, 0)
    assert box_indices(g, 4, 7) == (5, 4)
    assert box_indices(g, 8, 8) == (8, 8)


def test_criteria_round_trip_labels():
    g = Geometry()
    assert readable_criteria(criteria_from_id(g, 0)) == "Cell(0,0)"
    assert readable_criteria(criteria_from_id(g, 80)) == "Cell(8,8)"
    assert readable_criteria(criteria_from_id(g, 81 + 2 * 9 + 4)) == "Row(2):4"
    assert readable_criteria(criteria_from_id(g, 162 + 5 * 9 + 1)) == "Col(5):1"
    assert readable_criteria(criteria_from_id(g, 243 + 7 * 9 + 8)) == "Box(7):8"
    assert criteria_id(g, CriteriaType.COL_HAS_VALUE, 5, 1) == 162 + 5 * 9 + 1


def test_criteria_from_id_rejects_out_of_range():
    with pytest.raises(ValueError):
        criteria_from_id(Geometry(), 324)
    with pytest.raises(ValueError):
        criteria_from_id(Geometry(), -1)


def test_related_answers_cell_first():
    answers = related_answers(Geometry(), 4, 7, 2)
    assert [a.type for a in answers] == list(CriteriaType)
    assert [a.node_id for a in answers] == [2, 7, 4, 4]
    assert all((a.row, a.column, a.value, a.box) == (4, 7, 2, 5) for a in answers)


def test_small_matrix_shape(small):
    board = small.board
    heads = board.columns()
    assert len(heads) == 64
    assert all(board[h].size == 4 for h in heads)
    check_rings(board)

    matrix = to_dense_matrix(board)
    assert len(matrix) == 64
    assert all(sum(row) == 4 for row in matrix)


def test_rows_thread_cell_row_column_box(small):
    board = small.board
    cell_node = small.node(criteria_id(small.geometry, CriteriaType.CELL_FILLED, 1, 2), 3)
    members = list(iterate_horizontal(board, cell_node))
    assert [board[n].label for n in members] == [
        "Cell(1,2)=3",
        "Row(1):3@2",
        "Col(2):3@1",
        "Box(1):3@2",
    ]


def test_interpret_node_agrees_across_row(small):
    board = small.board
    for head in board.columns()[:16]:
        node = board[head].down
        expected = interpret_node(small, node)
        for member in iterate_horizontal(board, node):
            answer = interpret_node(small, member)
            assert (answer.row, answer.column, answer.value) == (expected.row, expected.column, expected.value)


def test_grid_from_solution(small):
    nodes = [small.node(criteria_id(small.geometry, CriteriaType.ROW_HAS_VALUE, 3, 1), 0)]
    grid = grid_from_solution(small, nodes)
    assert grid[3][0] == 2
    assert sum(v for row in grid for v in row) == 2


def test_parse_and_format_grid():
    grid = parse_grid("1.3. ..2. 0000 4..1", size=4)
    assert grid == [[1, 0, 3, 0], [0, 0, 2, 0], [0, 0, 0, 0], [4, 0, 0, 1]]
    assert format_grid(grid) == "1.3.\n..2.\n....\n4..1"


def test_parse_grid_rejects_bad_input():
    with pytest.raises(ValueError, match="Expected 16 cells"):
        parse_grid("123", size=4)
    with pytest.raises(ValueError, match="Invalid cell"):
        parse_grid("5" + "." * 15, size=4)
