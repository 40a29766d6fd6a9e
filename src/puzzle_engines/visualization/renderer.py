from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from puzzle_engines.blockstack import BlockStackSnapshot
from puzzle_engines.minefield import MinefieldSnapshot, Visibility
from puzzle_engines.tilemerge import TileMergeSnapshot

from .palette import BACKGROUND, MINE_COUNT_COLORS, block_color, tile_color


class Renderer:
    """Draws engine snapshots; holds no game state of its own."""

    def __init__(self, cell_size: int = 30, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self._font: Optional[pygame.font.Font] = None

    @property
    def font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, max(16, self.cell_size - 6))
        return self._font

    def window_size(self, rows: int, cols: int, side_panel: int = 0) -> Tuple[int, int]:
        return (cols * self.cell_size + self.margin * 2 + side_panel,
                rows * self.cell_size + self.margin * 2 + 40)

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            self.margin + x * self.cell_size,
            self.margin + y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def cell_at(self, pos: Tuple[int, int]) -> Tuple[int, int]:
        """Map a pixel position to (row, col); may be off the board."""
        px, py = pos
        return (py - self.margin) // self.cell_size, (px - self.margin) // self.cell_size

    def _status_line(self, screen: pygame.Surface, text: str) -> None:
        surf = self.font.render(text, True, (235, 235, 235))
        screen.blit(surf, (self.margin, screen.get_height() - 32))

    def draw_block_stack(self, screen: pygame.Surface, snapshot: BlockStackSnapshot) -> None:
        screen.fill(BACKGROUND)
        state = snapshot.overlay()
        h, w = state.shape
        ghost = snapshot.ghost_piece
        ghost_cells = set(ghost.cells()) if ghost is not None else set()
        for y in range(h):
            for x in range(w):
                v = int(state[y, x])
                pygame.draw.rect(screen, block_color(v), self._cell_rect(x, y))
                if v == 0 and (x, y) in ghost_cells:
                    pygame.draw.rect(screen, (120, 120, 130), self._cell_rect(x, y), 2)
        if snapshot.next_piece is not None:
            x0 = w + 1
            shape = snapshot.next_piece.shape()
            for py in range(shape.shape[0]):
                for px in range(shape.shape[1]):
                    if shape[py, px]:
                        pygame.draw.rect(screen, block_color(int(snapshot.next_piece.kind)),
                                         self._cell_rect(x0 + px, py + 1))
        self._status_line(
            screen,
            f"{snapshot.status.value}  score {snapshot.score}  level {snapshot.level}  lines {snapshot.lines_cleared}",
        )
        pygame.display.flip()

    def draw_tile_merge(self, screen: pygame.Surface, snapshot: TileMergeSnapshot) -> None:
        screen.fill(BACKGROUND)
        n = snapshot.board.shape[0]
        for y in range(n):
            for x in range(n):
                v = int(snapshot.board[y, x])
                rect = self._cell_rect(x, y)
                pygame.draw.rect(screen, tile_color(v), rect)
                if snapshot.merged_tiles[y, x] or snapshot.new_tiles[y, x]:
                    pygame.draw.rect(screen, (255, 255, 255), rect, 2)
                if v:
                    label = self.font.render(str(v), True, (60, 58, 50) if v <= 4 else (249, 246, 242))
                    screen.blit(label, label.get_rect(center=rect.center))
        self._status_line(
            screen,
            f"{snapshot.status.value}  score {snapshot.score}  best {snapshot.best_score}  moves {snapshot.move_count}",
        )
        pygame.display.flip()

    def draw_minefield(self, screen: pygame.Surface, snapshot: MinefieldSnapshot) -> None:
        screen.fill(BACKGROUND)
        visibility: np.ndarray = snapshot.visibility
        rows, cols = visibility.shape
        for y in range(rows):
            for x in range(cols):
                rect = self._cell_rect(x, y)
                vis = int(visibility[y, x])
                if vis == Visibility.REVEALED:
                    if snapshot.mines[y, x]:
                        pygame.draw.rect(screen, (220, 40, 40), rect)
                        continue
                    pygame.draw.rect(screen, (200, 200, 205), rect)
                    count = int(snapshot.neighbor_counts[y, x])
                    if count:
                        label = self.font.render(str(count), True, MINE_COUNT_COLORS[count])
                        screen.blit(label, label.get_rect(center=rect.center))
                else:
                    pygame.draw.rect(screen, (90, 90, 100), rect)
                    if vis == Visibility.FLAGGED:
                        pygame.draw.circle(screen, (240, 80, 60), rect.center, self.cell_size // 4)
        self._status_line(
            screen,
            f"{snapshot.status.value}  mines left {snapshot.remaining_mine_count}  score {snapshot.score}",
        )
        pygame.display.flip()
