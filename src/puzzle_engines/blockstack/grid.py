from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

import numpy as np

from .pieces import Coordinate


@dataclass
class PlacementResult:
    placed: bool
    lines_cleared: int = 0
    cleared_rows: Tuple[int, ...] = field(default_factory=tuple)


class GameGrid:
    """Discrete 2D grid for the falling-block stack.

    The grid uses 0 for empty cells and the locked piece's ``TetrominoType``
    value for filled cells, so renderers can color by piece. Row 0 is the top.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if not self.is_inside(x, y):
                return False
            if self.grid[y, x] != 0:
                return False
        return True

    def place(self, cells: Iterable[Coordinate], value: int) -> PlacementResult:
        """Write cells with `value`, clear full rows, and return the result."""
        cells = list(cells)
        if not self.can_place(cells):
            return PlacementResult(placed=False)
        for x, y in cells:
            self.grid[y, x] = value
        rows = self.clear_full_lines()
        return PlacementResult(placed=True, lines_cleared=len(rows), cleared_rows=rows)

    def full_rows(self) -> Tuple[int, ...]:
        # Bottom-to-top order.
        full = np.where(np.all(self.grid != 0, axis=1))[0]
        return tuple(int(r) for r in full[::-1])

    def clear_full_lines(self) -> Tuple[int, ...]:
        rows = self.full_rows()
        if not rows:
            return rows
        num = len(rows)
        # Remove full rows and add empty rows at the top
        kept = np.delete(self.grid, list(rows), axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, kept))
        return rows

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        top_index = int(non_empty_rows[0])
        return self.height - top_index

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self.grid[:, x]
            seen_block = False
            for cell in column:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
