

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import pygame

from falling_blocks.game import RenderCell


EMPTY = (20, 20, 26)
BACKGROUND = (10, 10, 14)
PANEL = (30, 30, 36)
TEXT = (230, 230, 230)


def _color_for_name(name: str) -> Tuple[int, int, int]:
    try:
        color = pygame.Color(name)
    except ValueError:
        return (200, 200, 200)
    return color.r, color.g, color.b


class Renderer:
    """Render sink: draws colored cells for the board and the next-piece panel."""

    def __init__(self, width: int, height: int, cell_size: int = 28, margin: int = 20,
                 preview_cells: Tuple[int, int] = (6, 5), preview_cell_size: int = 12) -> None:
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.margin = margin
        self.preview_cells = preview_cells
        self.preview_cell_size = preview_cell_size

    @property
    def window_size(self) -> Tuple[int, int]:
        board_w = self.width * self.cell_size + 1
        board_h = self.height * self.cell_size + 1
        panel_w = self.preview_cells[0] * (self.preview_cell_size + 1) + 1
        return board_w + panel_w + self.margin * 3, board_h + self.margin * 2

    def _grid_surface(self, cells: Iterable[RenderCell], columns: int, rows: int, size: int, gap: int) -> pygame.Surface:
        surf = pygame.Surface((columns * (size + gap) + gap, rows * (size + gap) + gap))
        surf.fill(PANEL)
        for y in range(rows):
            for x in range(columns):
                rect = pygame.Rect(gap + x * (size + gap), gap + y * (size + gap), size, size)
                pygame.draw.rect(surf, EMPTY, rect)
        for cell in cells:
            # Cells above the visible top are not drawn
            if not (0 <= cell.x < columns and 0 <= cell.y < rows):
                continue
            rect = pygame.Rect(gap + cell.x * (size + gap), gap + cell.y * (size + gap), size, size)
            pygame.draw.rect(surf, _color_for_name(cell.color), rect)
        return surf

    def draw(self, screen: pygame.Surface, cells: Sequence[RenderCell], preview: Sequence[RenderCell],
             lines: Sequence[str] = (), font: pygame.font.Font | None = None) -> None:
        screen.fill(BACKGROUND)
        board = self._grid_surface(cells, self.width, self.height, self.cell_size - 1, 1)
        screen.blit(board, (self.margin, self.margin))
        panel_x = self.margin * 2 + board.get_width()
        panel = self._grid_surface(preview, self.preview_cells[0], self.preview_cells[1], self.preview_cell_size, 1)
        screen.blit(panel, (panel_x, self.margin))
        if font is not None:
            y = self.margin * 2 + panel.get_height()
            for line in lines:
                img = font.render(line, True, TEXT)
                screen.blit(img, (panel_x, y))
                y += 20
        pygame.display.flip()
