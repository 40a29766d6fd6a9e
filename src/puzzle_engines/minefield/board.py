from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, List, Set, Tuple

import numpy as np


Coordinate = Tuple[int, int]


class Visibility(IntEnum):
    HIDDEN = 0
    REVEALED = 1
    FLAGGED = 2
    QUESTIONED = 3


@dataclass(frozen=True)
class Cell:
    is_mine: bool
    neighbor_mine_count: int
    visibility: Visibility
    row: int
    col: int


class MineBoard:
    """Mine layout, neighbor counts and per-cell visibility as parallel arrays.

    Mines stay unplaced until ``place_mines`` is called with the first
    revealed coordinate.
    """

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        self.mines = np.zeros((self.rows, self.cols), dtype=np.bool_)
        self.counts = np.zeros((self.rows, self.cols), dtype=np.int8)
        self.visibility = np.full((self.rows, self.cols), Visibility.HIDDEN, dtype=np.int8)
        self.mines_placed = False

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def neighbors(self, row: int, col: int) -> Iterator[Coordinate]:
        for r in range(max(0, row - 1), min(self.rows, row + 2)):
            for c in range(max(0, col - 1), min(self.cols, col + 2)):
                if r == row and c == col:
                    continue
                yield r, c

    def cell(self, row: int, col: int) -> Cell:
        return Cell(
            is_mine=bool(self.mines[row, col]),
            neighbor_mine_count=int(self.counts[row, col]),
            visibility=Visibility(int(self.visibility[row, col])),
            row=row,
            col=col,
        )

    def place_mines(self, mine_count: int, safe_row: int, safe_col: int, rng: random.Random) -> None:
        """Scatter ``mine_count`` mines away from the opening cell.

        The opening cell and its neighbors are excluded. Boards too dense to
        spare all nine cells fall back to excluding only the opening cell.
        """
        excluded: Set[Coordinate] = {(safe_row, safe_col)}
        excluded.update(self.neighbors(safe_row, safe_col))
        available = self._positions_excluding(excluded)
        if len(available) < mine_count:
            available = self._positions_excluding({(safe_row, safe_col)})
        if len(available) < mine_count:
            raise ValueError("insufficient_space_for_mines")
        self.load_mines(rng.sample(available, mine_count))

    def load_mines(self, positions: Iterable[Coordinate]) -> None:
        positions = list(positions)
        self.check_positions(positions)
        self.mines.fill(False)
        for r, c in positions:
            self.mines[r, c] = True
        self._compute_counts()
        self.mines_placed = True

    def check_positions(self, positions: Iterable[Coordinate]) -> None:
        for r, c in positions:
            if not self.in_bounds(r, c):
                raise ValueError(f"mine position {(r, c)} is off the {self.rows}x{self.cols} board")

    def _positions_excluding(self, excluded: Set[Coordinate]) -> List[Coordinate]:
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if (r, c) not in excluded
        ]

    def _compute_counts(self) -> None:
        padded = np.pad(self.mines.astype(np.int8), 1)
        total = np.zeros((self.rows, self.cols), dtype=np.int8)
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                total += padded[1 + dr : 1 + dr + self.rows, 1 + dc : 1 + dc + self.cols]
        # Mines carry no count.
        total[self.mines] = 0
        self.counts = total

    def flood_reveal(self, row: int, col: int) -> int:
        """Reveal a safe cell, spreading through zero-count cells.

        Returns the number of cells newly revealed. Flagged cells are left
        alone and every cell is revealed at most once.
        """
        revealed = 0
        queue = deque([(row, col)])
        while queue:
            r, c = queue.popleft()
            if self.visibility[r, c] != Visibility.HIDDEN or self.mines[r, c]:
                continue
            self.visibility[r, c] = Visibility.REVEALED
            revealed += 1
            if self.counts[r, c] == 0:
                for nr, nc in self.neighbors(r, c):
                    if self.visibility[nr, nc] == Visibility.HIDDEN:
                        queue.append((nr, nc))
        return revealed

    def reveal_mines(self) -> None:
        unflagged = self.mines & (self.visibility != Visibility.FLAGGED)
        self.visibility[unflagged] = Visibility.REVEALED

    def flagged_neighbors(self, row: int, col: int) -> int:
        return sum(1 for r, c in self.neighbors(row, col) if self.visibility[r, c] == Visibility.FLAGGED)
