import csv

import pytest

from main import EXIT_BAD_INPUT, EXIT_SOLVED, EXIT_TIMEOUT, EXIT_UNSOLVABLE, main


def test_solves_small_puzzle(capsys):
    assert main(["--box-width", "2", ".234 3.12 21.3 432."]) == EXIT_SOLVED
    out = capsys.readouterr().out
    assert "1234\n3412\n2143\n4321" in out
    assert "Done!" in out


def test_unsolvable_puzzle(capsys):
    assert main(["--box-width", "2", "12....3....3...."]) == EXIT_UNSOLVABLE
    assert "No solution found." in capsys.readouterr().out


def test_invalid_puzzle(capsys):
    assert main(["--box-width", "2", "123"]) == EXIT_BAD_INPUT
    assert "Invalid puzzle" in capsys.readouterr().err


def test_conflicting_clues(capsys):
    assert main(["--box-width", "2", "1..1............"]) == EXIT_BAD_INPUT
    assert "conflicts" in capsys.readouterr().err


def test_bad_box_width(capsys):
    assert main(["--box-width", "0"]) == EXIT_BAD_INPUT


def test_export_matrix(tmp_path):
    path = tmp_path / "matrix.csv"
    assert main(["--box-width", "2", "--export-matrix", str(path)]) == EXIT_SOLVED
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 64
    assert all(len(row) == 64 for row in rows)
    assert all(row.count("1") == 4 for row in rows)


def test_time_limit_reports_timeout(capsys):
    assert main(["--time-limit", "0.000001"]) == EXIT_TIMEOUT
    out = capsys.readouterr().out
    assert "Gave up after 1e-06 seconds" in out
    assert "No solution found." not in out


def test_generous_time_limit_still_solves(capsys):
    assert main(["--box-width", "2", "--time-limit", "60", ".234 3.12 21.3 432."]) == EXIT_SOLVED
    assert "Done!" in capsys.readouterr().out


@pytest.mark.parametrize("limit", ["0", "-1"])
def test_non_positive_time_limit(capsys, limit):
    assert main(["--box-width", "2", "--time-limit", limit]) == EXIT_BAD_INPUT
    assert "Time limit must be positive" in capsys.readouterr().err
