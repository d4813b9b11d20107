import random
from typing import Any, Dict, List, Optional, Set, Tuple

import pygame

from gui import (
    BG, CARD_BG, CELL_SIZE, GRID, PANEL_HEIGHT, TEXT_MAIN, TEXT_SECONDARY,
    draw_sudoku_grid, draw_top_bar, grid_origin,
)
from search import solve_steps
from solver import apply_clues, release_clues
from sudoku import DIGITS, Grid, SudokuMatrix, grid_from_solution, interpret_node

# Long searches are cut off here; the view then ends before the solution.
MAX_HISTORY = 20000

CONTROL_BUTTONS = [("<<", "prev"), ("PLAY", "toggle"), (">>", "next"), ("MENU", "menu")]


def describe_row(state: 'VizState', node: int) -> str:
    answer = interpret_node(state.matrix, node)
    return f"{DIGITS[answer.value]} at row {answer.row + 1}, column {answer.column + 1}"


def get_narrative_text(event_type: str, data: Dict[str, Any], context: Dict[str, Any], state: 'VizState') -> List[str]:
    """Short narrative for one step of the search."""

    # Deterministic per step so scrubbing back and forth does not flicker.
    rng = random.Random(state.current_step)
    board = state.matrix.board

    if event_type == "INIT":
        variations = [
            ["STARTING", f"{data.get('columns', '?')} constraints are still open."],
            ["READY", "Clues are placed; the remaining constraints wait."],
        ]

    elif event_type == "CHOOSE_COL":
        variations = [
            ["ANALYZING", f"{data['label']} is the tightest constraint.", f"Only {data['size']} options left."],
            ["SCANNING", f"Aha! {data['label']} has just {data['size']} possible moves."],
        ]

    elif event_type == "SELECT_ROW":
        idx = context.get("option_idx", "?")
        total = context.get("total_options", "?")
        variations = [
            ["DECIDING", f"Option {idx} of {total}:", f"put {describe_row(state, data['row'])}."],
            ["HYPOTHESIZING", f"What if I pick option {idx}/{total}?", f"Writing {describe_row(state, data['row'])}."],
        ]

    elif event_type == "UNSELECT_ROW":
        variations = [
            ["UNDOING", f"Erasing {describe_row(state, data['row'])}.", "Let's try the next option instead."],
            ["RETREATING", "That didn't work out. Next!"],
        ]

    elif event_type == "BACKTRACK":
        label = board.describe(data["column"])
        variations = [
            ["BACKTRACKING", f"I cannot satisfy {label}.", data["reason"]],
            ["DEAD END", f"I'm stuck on {label}.", "Going back up the tree..."],
        ]

    elif event_type == "SOLUTION":
        variations = [
            ["SOLVED", "Every constraint is covered exactly once."],
            ["SUCCESS", "All constraints are satisfied."],
        ]

    else:
        return []

    return rng.choice(variations)


class VizState:
    def __init__(self, matrix: SudokuMatrix, clues: Grid, max_steps: int = MAX_HISTORY):
        self.matrix = matrix
        self.clues = clues
        self.box_width = matrix.geometry.box_width

        # Generate history in memory, with the clues committed for the duration.
        print("Generating history...")
        raw: List[Dict[str, Any]] = []
        committed = apply_clues(matrix, clues)
        steps = solve_steps(matrix.board)
        try:
            for event in steps:
                raw.append(event)
                if event["type"] == "SOLUTION" or len(raw) >= max_steps:
                    break
        finally:
            steps.close()
            release_clues(matrix, committed)

        self.solved = bool(raw) and raw[-1]["type"] == "SOLUTION"
        self.truncated = not self.solved and len(raw) >= max_steps
        self.history = self.process_history(raw)
        print(f"History generated: {len(self.history)} steps.")

        self.total_steps = len(self.history)
        self.current_step = 0
        self.playing = False
        self.play_speed = 0.1
        self.timer = 0.0

        self.current_event: Dict[str, Any] = {}
        self.current_narrative: List[str] = []
        self.current_grid: Grid = []
        self.highlight: Set[Tuple[int, int]] = set()
        self.set_step(0)

    def process_history(self, raw_events: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Drops COVER/UNCOVER noise and tags each SELECT_ROW with its
        'option X of Y' position in the column being tried.
        """
        processed = []
        # Stack of {column, total, current}
        context_stack: List[Dict[str, Any]] = []

        for event in raw_events:
            etype = event["type"]
            data = event["data"]

            if etype == "CHOOSE_COL":
                context_stack.append({"column": data["chosen"], "total": data["size"], "current": 0})
                processed.append(event)

            elif etype == "SELECT_ROW":
                ctx = context_stack[-1]
                ctx["current"] += 1
                event["narrative_ctx"] = {
                    "column": ctx["column"],
                    "option_idx": ctx["current"],
                    "total_options": ctx["total"],
                }
                processed.append(event)

            elif etype == "UNCOVER_COL":
                context_stack.pop()

            elif etype != "COVER_COL":
                processed.append(event)

        return processed

    def update(self, dt: float):
        if self.playing and self.current_step < self.total_steps - 1:
            self.timer += dt
            if self.timer >= self.play_speed:
                self.timer = 0
                self.set_step(self.current_step + 1)
        elif self.current_step >= self.total_steps - 1:
            self.playing = False

    def set_step(self, step: int):
        self.current_step = step
        self.current_event = self.history[step]

        event_type = self.current_event["type"]
        data = self.current_event["data"]
        self.current_narrative = get_narrative_text(
            event_type, data, self.current_event.get("narrative_ctx", {}), self
        )
        self.current_grid = grid_from_solution(self.matrix, self.current_event["state"])

        self.highlight = set()
        if event_type in ("SELECT_ROW", "UNSELECT_ROW"):
            answer = interpret_node(self.matrix, data["row"])
            self.highlight.add((answer.row, answer.column))

    def step_forward(self):
        if self.current_step < self.total_steps - 1:
            self.set_step(self.current_step + 1)

    def step_backward(self):
        if self.current_step > 0:
            self.set_step(self.current_step - 1)

    def toggle_play(self):
        self.playing = not self.playing


def _control_rects(screen_size: Tuple[int, int]) -> List[Tuple[pygame.Rect, str]]:
    w, h = screen_size
    btn_y = h - 50
    total_btn_w = len(CONTROL_BUTTONS) * 80
    start_x = (w - total_btn_w) // 2
    return [
        (pygame.Rect(start_x + i * 80, btn_y, 70, 30), action)
        for i, (_, action) in enumerate(CONTROL_BUTTONS)
    ]


def draw_viz(screen: pygame.Surface, font_title: pygame.font.Font, font_body: pygame.font.Font,
             cell_font: pygame.font.Font, state: VizState):
    screen.fill(BG)
    w, h = screen.get_size()
    n = len(state.clues)

    subtitle = f"Step {state.current_step + 1} of {state.total_steps}"
    if state.truncated:
        subtitle += " (trace cut short)"
    draw_top_bar(screen, font_title, font_body, "Algorithm X", subtitle)

    origin = grid_origin((w, h), n)
    draw_sudoku_grid(
        screen, cell_font, state.clues, state.current_grid, state.box_width, origin,
        highlight=state.highlight,
        failed=state.current_step == state.total_steps - 1 and not state.solved,
    )

    # Narrative panel
    panel = pygame.Rect(16, origin[1] + n * CELL_SIZE + 8, w - 32, PANEL_HEIGHT - 70)
    pygame.draw.rect(screen, CARD_BG, panel, border_radius=12)
    y = panel.y + 10
    for i, line in enumerate(state.current_narrative):
        color = TEXT_MAIN if i == 0 else TEXT_SECONDARY
        screen.blit(font_body.render(line, True, color), (panel.x + 16, y))
        y += 24

    mouse_pos = pygame.mouse.get_pos()
    for (text, action), (rect, _) in zip(CONTROL_BUTTONS, _control_rects((w, h))):
        if action == "toggle" and state.playing:
            text = "PAUSE"
        color = (50, 50, 55) if rect.collidepoint(mouse_pos) else CARD_BG
        pygame.draw.rect(screen, color, rect, border_radius=6)
        pygame.draw.rect(screen, GRID, rect, width=1, border_radius=6)
        lbl = font_body.render(text, True, TEXT_MAIN)
        screen.blit(lbl, lbl.get_rect(center=rect.center))


def handle_viz_input(event: pygame.event.Event, state: VizState, screen_size: Tuple[int, int]) -> Optional[str]:
    """Returns an action string for a clicked button or a shortcut key."""
    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        for rect, action in _control_rects(screen_size):
            if rect.collidepoint(event.pos):
                return action

    elif event.type == pygame.KEYDOWN:
        if event.key == pygame.K_LEFT:
            return "prev"
        if event.key == pygame.K_RIGHT:
            return "next"
        if event.key == pygame.K_SPACE:
            return "toggle"

    return None
