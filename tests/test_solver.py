import pytest

from dlx import fingerprint
from search import SearchStats
from solver import apply_clues, build_exact_cover, deadline, release_clues, solve_sudoku
from sudoku import parse_grid

CLASSIC = "53..7....6..195....98....6.8...6...34..8.3..17...2...6.6....28....419..5....8..79"
CLASSIC_SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)

SMALL_SOLUTION = [
    [1, 2, 3, 4],
    [3, 4, 1, 2],
    [2, 1, 4, 3],
    [4, 3, 2, 1],
]


def is_valid(grid, box_width):
    n = box_width * box_width
    expected = set(range(1, n + 1))
    rows = [set(row) for row in grid]
    cols = [set(grid[r][c] for r in range(n)) for c in range(n)]
    boxes = [
        set(
            grid[br * box_width + r][bc * box_width + c]
            for r in range(box_width)
            for c in range(box_width)
        )
        for br in range(box_width)
        for bc in range(box_width)
    ]
    return all(group == expected for group in rows + cols + boxes)


@pytest.fixture
def small():
    return build_exact_cover(box_width=2)


def test_fills_empty_small_grid():
    grid = solve_sudoku(box_width=2)
    assert is_valid(grid, 2)


def test_fills_empty_standard_grid():
    grid = solve_sudoku()
    assert is_valid(grid, 3)


def test_small_puzzle_with_known_answer(small):
    clues = parse_grid(".234 3.12 21.3 432.", size=4)
    assert solve_sudoku(clues, matrix=small) == SMALL_SOLUTION


def test_classic_puzzle():
    grid = solve_sudoku(parse_grid(CLASSIC))
    assert grid == parse_grid(CLASSIC_SOLUTION)


def test_reusing_matrix_leaves_it_untouched(small):
    before = fingerprint(small.board)
    clues = parse_grid("1... .... ..4. ....", size=4)
    first = solve_sudoku(clues, matrix=small)
    assert fingerprint(small.board) == before
    assert solve_sudoku(clues, matrix=small) == first
    assert first[0][0] == 1 and first[2][2] == 4
    assert is_valid(first, 2)


def test_complete_grid_is_returned_as_is(small):
    assert solve_sudoku(SMALL_SOLUTION, matrix=small) == SMALL_SOLUTION


def test_unsolvable_clues(small):
    # (0,2) must be 4 and (0,3) must be 3, but column 3 already has a 3.
    clues = parse_grid("12.. ..3. ...3 ....", size=4)
    before = fingerprint(small.board)
    assert solve_sudoku(clues, matrix=small) is None
    assert fingerprint(small.board) == before


def test_conflicting_clues_are_rejected(small):
    before = fingerprint(small.board)
    with pytest.raises(ValueError, match="conflicts"):
        apply_clues(small, parse_grid("1..1 .... .... ....", size=4))
    assert fingerprint(small.board) == before


def test_out_of_range_clue(small):
    with pytest.raises(ValueError, match="out of range"):
        apply_clues(small, [[5, 0, 0, 0]] + [[0] * 4 for _ in range(3)])


def test_wrong_grid_shape(small):
    with pytest.raises(ValueError):
        apply_clues(small, [[0] * 4])


def test_apply_and_release_clues(small):
    before = fingerprint(small.board)
    committed = apply_clues(small, parse_grid("1... .2.. ..3. ...4", size=4))
    assert len(committed) == 4
    # Each clue claims four constraints.
    assert len(small.board.columns()) == 64 - 16
    release_clues(small, committed)
    assert fingerprint(small.board) == before


def test_should_stop_gives_up():
    assert solve_sudoku(should_stop=lambda: True) is None


def test_stats_tell_cancelled_from_unsolvable():
    stats = SearchStats()
    assert solve_sudoku(should_stop=lambda: True, stats=stats) is None
    assert stats.cancelled

    stats = SearchStats()
    assert solve_sudoku(parse_grid("12....3....3....", size=4), box_width=2, stats=stats) is None
    assert not stats.cancelled
    assert stats.calls > 0


def test_deadline():
    assert deadline(0)()
    assert not deadline(60)()
