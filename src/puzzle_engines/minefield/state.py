from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Tuple

import numpy as np

from puzzle_engines.common import Clock, GameStatus, Observable, wall_clock

from .board import Cell, MineBoard, Visibility

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"
    CUSTOM = "custom"


DIFFICULTY_MULTIPLIERS: Dict[Difficulty, int] = {
    Difficulty.BEGINNER: 1,
    Difficulty.INTERMEDIATE: 2,
    Difficulty.EXPERT: 3,
    Difficulty.CUSTOM: 1,
}

CUSTOM_MIN_SIZE = 5
CUSTOM_MAX_SIZE = 50
CUSTOM_MAX_MINE_RATIO = 0.8


@dataclass(frozen=True)
class MinefieldConfig:
    rows: int
    cols: int
    mine_count: int
    difficulty: Difficulty = Difficulty.CUSTOM

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"board dimensions must be positive, got {self.rows}x{self.cols}")
        if not 0 < self.mine_count < self.rows * self.cols:
            raise ValueError(
                f"mine_count must be in (0, {self.rows * self.cols}), got {self.mine_count}"
            )

    @property
    def safe_cell_count(self) -> int:
        return self.rows * self.cols - self.mine_count


DIFFICULTY_CONFIGS: Dict[Difficulty, MinefieldConfig] = {
    Difficulty.BEGINNER: MinefieldConfig(9, 9, 10, Difficulty.BEGINNER),
    Difficulty.INTERMEDIATE: MinefieldConfig(16, 16, 40, Difficulty.INTERMEDIATE),
    Difficulty.EXPERT: MinefieldConfig(16, 30, 99, Difficulty.EXPERT),
}


def custom_config(rows: int, cols: int, mines: int) -> MinefieldConfig:
    """Clamp user-supplied settings into a playable custom config."""
    rows = max(CUSTOM_MIN_SIZE, min(CUSTOM_MAX_SIZE, rows))
    cols = max(CUSTOM_MIN_SIZE, min(CUSTOM_MAX_SIZE, cols))
    max_mines = math.floor(rows * cols * CUSTOM_MAX_MINE_RATIO)
    mines = min(max(1, mines), max_mines)
    return MinefieldConfig(rows, cols, mines, Difficulty.CUSTOM)


def score_for(config: MinefieldConfig, elapsed_seconds: int) -> int:
    time_bonus = max(0, 1000 - elapsed_seconds)
    return (time_bonus + config.mine_count * 10) * DIFFICULTY_MULTIPLIERS[config.difficulty]


@dataclass(frozen=True)
class MinefieldSnapshot:
    status: GameStatus
    config: MinefieldConfig
    mines: np.ndarray
    neighbor_counts: np.ndarray
    visibility: np.ndarray
    remaining_mine_count: int
    flagged_count: int
    revealed_safe_cell_count: int
    start_time: Optional[float]
    end_time: Optional[float]
    score: int

    def cell(self, row: int, col: int) -> Cell:
        return Cell(
            is_mine=bool(self.mines[row, col]),
            neighbor_mine_count=int(self.neighbor_counts[row, col]),
            visibility=Visibility(int(self.visibility[row, col])),
            row=row,
            col=col,
        )

    def cells(self) -> Iterator[Cell]:
        for r in range(self.config.rows):
            for c in range(self.config.cols):
                yield self.cell(r, c)


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = arr.copy()
    out.flags.writeable = False
    return out


class MinefieldState(Observable[MinefieldSnapshot]):
    """Mine-sweep board state manager.

    Every public command returns False instead of raising when it has no
    effect (terminal status, coordinates off the board, cell in the wrong
    visibility state).
    """

    def __init__(
        self,
        config: Optional[MinefieldConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = wall_clock,
    ) -> None:
        super().__init__()
        self.rng = rng or random.Random()
        self.clock = clock
        self._reset_fields(config or DIFFICULTY_CONFIGS[Difficulty.BEGINNER])

    def _reset_fields(self, config: MinefieldConfig) -> None:
        self.config = config
        self.board = MineBoard(config.rows, config.cols)
        self.status = GameStatus.IDLE
        self.flagged_count = 0
        self.revealed_safe_cell_count = 0
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.score = 0

    @property
    def remaining_mine_count(self) -> int:
        return self.config.mine_count - self.flagged_count

    def get_state(self) -> MinefieldSnapshot:
        return MinefieldSnapshot(
            status=self.status,
            config=self.config,
            mines=_frozen(self.board.mines),
            neighbor_counts=_frozen(self.board.counts),
            visibility=_frozen(self.board.visibility),
            remaining_mine_count=self.remaining_mine_count,
            flagged_count=self.flagged_count,
            revealed_safe_cell_count=self.revealed_safe_cell_count,
            start_time=self.start_time,
            end_time=self.end_time,
            score=self.score,
        )

    def cell(self, row: int, col: int) -> Optional[Cell]:
        if not self.board.in_bounds(row, col):
            return None
        return self.board.cell(row, col)

    def reveal(self, row: int, col: int) -> bool:
        if self.status.is_terminal or not self.board.in_bounds(row, col):
            return False
        if self.board.visibility[row, col] != Visibility.HIDDEN:
            return False
        if self.status is GameStatus.IDLE:
            self._begin(row, col)
        self._reveal_cell(row, col)
        self.notify()
        return True

    def toggle_flag(self, row: int, col: int) -> bool:
        if self.status.is_terminal or not self.board.in_bounds(row, col):
            return False
        current = self.board.visibility[row, col]
        if current == Visibility.HIDDEN:
            self.board.visibility[row, col] = Visibility.FLAGGED
            self.flagged_count += 1
        elif current == Visibility.FLAGGED:
            self.board.visibility[row, col] = Visibility.HIDDEN
            self.flagged_count -= 1
        else:
            return False
        self.notify()
        return True

    def can_auto_reveal(self, row: int, col: int) -> bool:
        if self.status is not GameStatus.PLAYING or not self.board.in_bounds(row, col):
            return False
        if self.board.visibility[row, col] != Visibility.REVEALED:
            return False
        count = int(self.board.counts[row, col])
        if count == 0 or self.board.mines[row, col]:
            return False
        return self.board.flagged_neighbors(row, col) == count

    def auto_reveal_neighbors(self, row: int, col: int) -> bool:
        if not self.can_auto_reveal(row, col):
            return False
        revealed = False
        for r, c in list(self.board.neighbors(row, col)):
            if self.status.is_terminal:
                break
            if self.board.visibility[r, c] == Visibility.HIDDEN:
                self._reveal_cell(r, c)
                revealed = True
        if revealed:
            self.notify()
        return revealed

    def restart(self, config: Optional[MinefieldConfig] = None) -> None:
        self._reset_fields(config or self.config)
        logger.debug("minefield reset to %dx%d/%d", self.config.rows, self.config.cols, self.config.mine_count)
        self.notify()

    def load_layout(self, mine_positions: Iterable[Tuple[int, int]]) -> None:
        """Start a game on a fixed mine layout instead of a random one.

        The board keeps its dimensions; the mine count follows the layout.
        """
        positions = sorted(set(mine_positions))
        self.board.check_positions(positions)
        config = replace(self.config, mine_count=len(positions))
        self._reset_fields(config)
        self.board.load_mines(positions)
        self.status = GameStatus.PLAYING
        self.start_time = self.clock()
        self.notify()

    def _begin(self, row: int, col: int) -> None:
        self.board.place_mines(self.config.mine_count, row, col, self.rng)
        self.status = GameStatus.PLAYING
        self.start_time = self.clock()
        logger.debug("mines placed around opening (%d, %d)", row, col)

    def _reveal_cell(self, row: int, col: int) -> None:
        if self.board.mines[row, col]:
            self.board.visibility[row, col] = Visibility.REVEALED
            self._finish(GameStatus.LOST)
            self.board.reveal_mines()
            return
        self.revealed_safe_cell_count += self.board.flood_reveal(row, col)
        if self.revealed_safe_cell_count == self.config.safe_cell_count:
            self._finish(GameStatus.WON)

    def _finish(self, status: GameStatus) -> None:
        self.status = status
        self.end_time = self.clock()
        if status is GameStatus.WON:
            elapsed = math.floor(self.end_time - (self.start_time or self.end_time))
            self.score = score_for(self.config, elapsed)
        logger.info("minefield %s (score=%d)", status.value, self.score)
