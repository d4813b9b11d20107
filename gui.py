# gui.py

from __future__ import annotations

from typing import List, Optional, Set, Tuple

import pygame

from sudoku import DIGITS, Grid

CELL_SIZE = 56
TOP_BAR_HEIGHT = 120
PANEL_HEIGHT = 170
MIN_WINDOW_WIDTH = 520


def window_size(grid_size: int) -> Tuple[int, int]:
    width = max(MIN_WINDOW_WIDTH, grid_size * CELL_SIZE + 32)
    return width, grid_size * CELL_SIZE + TOP_BAR_HEIGHT + PANEL_HEIGHT


# Colors (dark mode)
BG = (15, 15, 17)
CARD_BG = (30, 30, 34)
GRID = (90, 90, 95)
BOX_BORDER = (170, 170, 178)
TEXT_MAIN = (245, 245, 250)
TEXT_SECONDARY = (230, 230, 235)

CLUE_COLOR = (245, 245, 250)
FILLED_COLOR = (45, 140, 255)
HIGHLIGHT = (60, 200, 80)
FAILED = (250, 80, 80)


def draw_top_bar(
    screen: pygame.Surface,
    title_font: pygame.font.Font,
    label_font: pygame.font.Font,
    title: str,
    subtitle: str,
):
    w = screen.get_width()
    pygame.draw.rect(screen, BG, (0, 0, w, TOP_BAR_HEIGHT))

    card_rect = pygame.Rect(16, 16, w - 32, TOP_BAR_HEIGHT - 32)
    pygame.draw.rect(screen, CARD_BG, card_rect, border_radius=16)

    title_surf = title_font.render(title, True, TEXT_MAIN)
    screen.blit(title_surf, (card_rect.x + 20, card_rect.y + 12))

    sub_surf = label_font.render(subtitle, True, TEXT_SECONDARY)
    screen.blit(sub_surf, (card_rect.x + 20, card_rect.y + 48))


def grid_origin(screen_size: Tuple[int, int], grid_size: int, top: int = TOP_BAR_HEIGHT) -> Tuple[int, int]:
    w, _ = screen_size
    return (w - grid_size * CELL_SIZE) // 2, top


def draw_sudoku_grid(
    screen: pygame.Surface,
    cell_font: pygame.font.Font,
    clues: Grid,
    values: Optional[Grid],
    box_width: int,
    origin: Tuple[int, int],
    highlight: Optional[Set[Tuple[int, int]]] = None,
    failed: bool = False,
):
    """
    Draws the grid.
    clues: the puzzle as given; these digits are drawn in the main text color.
    values: digits to show in the remaining cells (None draws only clues).
    highlight: cells to outline (e.g. the row the search just selected).
    failed: outline the whole grid in red (no solution).
    """
    n = len(clues)
    ox, oy = origin
    highlight = highlight or set()

    for r in range(n):
        for c in range(n):
            x = ox + c * CELL_SIZE
            y = oy + r * CELL_SIZE
            rect = pygame.Rect(x + 2, y + 2, CELL_SIZE - 4, CELL_SIZE - 4)
            pygame.draw.rect(screen, CARD_BG, rect, border_radius=8)
            if (r, c) in highlight:
                pygame.draw.rect(screen, HIGHLIGHT, rect, width=2, border_radius=8)

            if clues[r][c]:
                digit, color = clues[r][c], CLUE_COLOR
            elif values is not None and values[r][c]:
                digit, color = values[r][c], FILLED_COLOR
            else:
                continue

            text_surf = cell_font.render(DIGITS[digit - 1], True, color)
            screen.blit(
                text_surf,
                (
                    x + (CELL_SIZE - text_surf.get_width()) // 2,
                    y + (CELL_SIZE - text_surf.get_height()) // 2,
                ),
            )

    # Box borders
    span = box_width * CELL_SIZE
    for br in range(box_width):
        for bc in range(box_width):
            box_rect = pygame.Rect(ox + bc * span, oy + br * span, span, span)
            pygame.draw.rect(screen, BOX_BORDER, box_rect, width=1)

    if failed:
        pygame.draw.rect(screen, FAILED, pygame.Rect(ox, oy, n * CELL_SIZE, n * CELL_SIZE), width=3, border_radius=4)


MENU_BUTTONS: List[Tuple[str, str]] = [
    ("Show Solution", "solution"),
    ("Understand the Algorithm", "algorithm"),
]


def _menu_rects(screen_size: Tuple[int, int]) -> List[Tuple[pygame.Rect, str]]:
    w, h = screen_size
    start_y = h // 2
    button_height = 60
    spacing = 20
    button_width = min(400, w - 80)
    return [
        (pygame.Rect((w - button_width) // 2, start_y + i * (button_height + spacing), button_width, button_height), action)
        for i, (_, action) in enumerate(MENU_BUTTONS)
    ]


def draw_menu(screen: pygame.Surface, title_font: pygame.font.Font, button_font: pygame.font.Font):
    screen.fill(BG)
    w, h = screen.get_size()

    title_surf = title_font.render("Dancing Links Sudoku", True, TEXT_MAIN)
    title_rect = title_surf.get_rect(center=(w // 2, h // 4))
    screen.blit(title_surf, title_rect)

    mouse_pos = pygame.mouse.get_pos()
    for (text, _), (rect, _) in zip(MENU_BUTTONS, _menu_rects((w, h))):
        # Hover effect
        color = CARD_BG
        if rect.collidepoint(mouse_pos):
            color = (50, 50, 55)

        pygame.draw.rect(screen, color, rect, border_radius=12)
        pygame.draw.rect(screen, GRID, rect, width=1, border_radius=12)

        label = button_font.render(text, True, TEXT_MAIN)
        screen.blit(label, label.get_rect(center=rect.center))


def get_menu_action(mouse_pos: Tuple[int, int], screen_size: Tuple[int, int]) -> str | None:
    for rect, action in _menu_rects(screen_size):
        if rect.collidepoint(mouse_pos):
            return action
    return None
