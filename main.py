from __future__ import annotations

import argparse
import csv
import logging
import sys
from typing import List, Optional

import pygame

from dlx import to_dense_matrix
from gui import BG, draw_menu, draw_sudoku_grid, draw_top_bar, get_menu_action, grid_origin, window_size
from search import SearchStats
from solver import build_exact_cover, deadline, solve_sudoku
from sudoku import Grid, SudokuMatrix, format_grid, parse_grid
from ui_state import AppState, UIState
from ui_viz import VizState, draw_viz, handle_viz_input

EXIT_SOLVED = 0
EXIT_UNSOLVABLE = 1
EXIT_BAD_INPUT = 2
EXIT_TIMEOUT = 3


def build_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Solve a sudoku with Knuth's Dancing Links (Algorithm X).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dancing-links                         # fill an empty 9x9 grid
  dancing-links 53..7....6..195....98....6.8...6...34..8.3..17...2...6.6....28....419..5....8..79
  dancing-links --box-width 2 1...........4...
  dancing-links --export-matrix matrix.csv
  dancing-links --gui <puzzle>
""",
    )
    parser.add_argument("puzzle", nargs="?", default=None,
                        help="cells row by row; '.' or '0' for blanks (default: empty grid)")
    parser.add_argument("--box-width", type=int, default=3,
                        help="width of one box; the grid is box-width squared wide (default: 3)")
    parser.add_argument("--export-matrix", metavar="PATH",
                        help="write the 0/1 exact cover matrix as CSV before solving")
    parser.add_argument("--time-limit", type=float, default=None, metavar="SECONDS",
                        help="give up after this many seconds")
    parser.add_argument("--gui", action="store_true",
                        help="show the solution and a step-through of the search")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def export_matrix(matrix: SudokuMatrix, path: str) -> None:
    rows = to_dense_matrix(matrix.board)
    with open(path, "w", newline="") as f:
        csv.writer(f).writerows(rows)
    print(f"Wrote {len(rows)}x{len(matrix.board.columns())} matrix to {path}")


def run_gui(matrix: SudokuMatrix, clues: Grid, solution: Optional[Grid]) -> None:
    pygame.init()
    n = matrix.geometry.size
    screen = pygame.display.set_mode(window_size(n), pygame.RESIZABLE)
    pygame.display.set_caption("Dancing Links Sudoku")

    # Fonts
    title_font = pygame.font.SysFont("SF Pro Display", 32, bold=True)
    label_font = pygame.font.SysFont("SF Pro Text", 24)
    cell_font = pygame.font.SysFont("SF Pro Text", 28, bold=True)
    body_font = pygame.font.SysFont("SF Pro Text", 18)

    clock = pygame.time.Clock()
    app_state = AppState()
    viz_state: VizState | None = None

    running = True
    while running:
        dt = clock.tick(60) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)

            if app_state.current_state == UIState.MENU:
                if event.type == pygame.MOUSEBUTTONDOWN:
                    action = get_menu_action(event.pos, screen.get_size())
                    if action == "solution":
                        app_state.current_state = UIState.SOLUTION
                    elif action == "algorithm":
                        if viz_state is None:
                            viz_state = VizState(matrix, clues)
                        app_state.current_state = UIState.ALGORITHM_VIEW

            elif app_state.current_state == UIState.SOLUTION:
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    app_state.current_state = UIState.MENU

            elif app_state.current_state == UIState.ALGORITHM_VIEW:
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    app_state.current_state = UIState.MENU
                action = handle_viz_input(event, viz_state, screen.get_size())
                if action == "prev":
                    viz_state.step_backward()
                elif action == "next":
                    viz_state.step_forward()
                elif action == "toggle":
                    viz_state.toggle_play()
                elif action == "menu":
                    app_state.current_state = UIState.MENU

        # Update
        if app_state.current_state == UIState.ALGORITHM_VIEW and viz_state:
            viz_state.update(dt)

        # Draw
        if app_state.current_state == UIState.MENU:
            draw_menu(screen, title_font, label_font)

        elif app_state.current_state == UIState.ALGORITHM_VIEW and viz_state:
            draw_viz(screen, title_font, body_font, cell_font, viz_state)

        elif app_state.current_state == UIState.SOLUTION:
            screen.fill(BG)
            subtitle = "Solved" if solution else "No solution exists"
            draw_top_bar(screen, title_font, label_font, f"{n}x{n} Sudoku", subtitle)
            draw_sudoku_grid(
                screen, cell_font, clues, solution, matrix.geometry.box_width,
                grid_origin(screen.get_size(), n), failed=solution is None,
            )

        pygame.display.flip()

    pygame.quit()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.box_width < 1 or args.box_width * args.box_width > 35:
        print(f"Unsupported box width {args.box_width}", file=sys.stderr)
        return EXIT_BAD_INPUT
    n = args.box_width * args.box_width

    if args.time_limit is not None and args.time_limit <= 0:
        print(f"Time limit must be positive, got {args.time_limit}", file=sys.stderr)
        return EXIT_BAD_INPUT

    try:
        clues = parse_grid(args.puzzle, n) if args.puzzle else [[0] * n for _ in range(n)]
    except ValueError as e:
        print(f"Invalid puzzle: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    print("Populating empty board...")
    matrix = build_exact_cover(args.box_width)

    if args.export_matrix:
        print("Writing sparse matrix...")
        export_matrix(matrix, args.export_matrix)

    print("Solving the puzzle...")
    should_stop = deadline(args.time_limit) if args.time_limit is not None else None
    stats = SearchStats()
    try:
        solution = solve_sudoku(clues, should_stop=should_stop, matrix=matrix, stats=stats)
    except ValueError as e:
        print(f"Invalid puzzle: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    if stats.cancelled:
        print(f"Gave up after {args.time_limit} seconds")
        return EXIT_TIMEOUT
    if solution is None:
        print("No solution found.")
    else:
        print(format_grid(solution))
        print("Done!")

    if args.gui:
        run_gui(matrix, clues, solution)

    return EXIT_SOLVED if solution is not None else EXIT_UNSOLVABLE


if __name__ == "__main__":
    sys.exit(main())
