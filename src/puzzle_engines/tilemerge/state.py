from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import numpy as np

from puzzle_engines.common import Clock, GameStatus, Observable, resolve_rng, wall_clock

from .grid import Direction, add_random_tile, can_move, slide
from .history import MoveHistory

logger = logging.getLogger(__name__)


@dataclass
class TileMergeConfig:
    board_size: int = 4
    win_target: int = 2048
    initial_cells: int = 2
    history_limit: int = 10
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.board_size < 2:
            raise ValueError(f"board_size must be at least 2, got {self.board_size}")
        if self.win_target < 4 or self.win_target & (self.win_target - 1):
            raise ValueError(f"win_target must be a power of two >= 4, got {self.win_target}")
        if not 0 <= self.initial_cells <= self.board_size * self.board_size:
            raise ValueError("initial_cells does not fit on the board")
        if self.history_limit <= 0:
            raise ValueError("history_limit must be positive")


@dataclass(frozen=True)
class MoveResult:
    moved: bool
    score_increase: int = 0
    # True when any tile is at or above the win target after the move.
    reached_2048: bool = False


@dataclass(frozen=True)
class TileCell:
    value: int
    row: int
    col: int
    is_new: bool = False
    is_merged: bool = False


@dataclass(frozen=True)
class TileMergeSnapshot:
    status: GameStatus
    board: np.ndarray
    new_tiles: np.ndarray
    merged_tiles: np.ndarray
    score: int
    best_score: int
    move_count: int
    highest_tile: int
    best_tile: int
    can_undo: bool
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    def cell(self, row: int, col: int) -> TileCell:
        return TileCell(
            value=int(self.board[row, col]),
            row=row,
            col=col,
            is_new=bool(self.new_tiles[row, col]),
            is_merged=bool(self.merged_tiles[row, col]),
        )

    def cells(self) -> Iterator[TileCell]:
        rows, cols = self.board.shape
        for r in range(rows):
            for c in range(cols):
                yield self.cell(r, c)


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = arr.copy()
    out.flags.writeable = False
    return out


class TileMergeState(Observable[TileMergeSnapshot]):
    def __init__(
        self,
        config: Optional[TileMergeConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = wall_clock,
        best_score: int = 0,
        best_tile: int = 0,
    ) -> None:
        super().__init__()
        self.config = config or TileMergeConfig()
        self.rng = resolve_rng(rng, self.config.random_seed)
        self.clock = clock
        self.best_score = best_score
        self.best_tile = best_tile
        self.history = MoveHistory(self.config.history_limit)
        self._reset_fields()

    def _reset_fields(self) -> None:
        n = self.config.board_size
        self.board = np.zeros((n, n), dtype=np.int64)
        self.new_tiles = np.zeros((n, n), dtype=np.bool_)
        self.merged_tiles = np.zeros((n, n), dtype=np.bool_)
        self.status = GameStatus.IDLE
        self.score = 0
        self.move_count = 0
        self.highest_tile = 0
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.history.clear()
        # Set once the player keeps going past the win target.
        self._win_acknowledged = False

    def get_state(self) -> TileMergeSnapshot:
        return TileMergeSnapshot(
            status=self.status,
            board=_frozen(self.board),
            new_tiles=_frozen(self.new_tiles),
            merged_tiles=_frozen(self.merged_tiles),
            score=self.score,
            best_score=self.best_score,
            move_count=self.move_count,
            highest_tile=self.highest_tile,
            best_tile=self.best_tile,
            can_undo=self.can_undo(),
            start_time=self.start_time,
            end_time=self.end_time,
        )

    def start_new_game(self) -> None:
        self._reset_fields()
        for _ in range(self.config.initial_cells):
            self._spawn_tile()
        self._update_tiles()
        self.status = GameStatus.PLAYING
        self.start_time = self.clock()
        self.notify()

    def can_move(self) -> bool:
        return can_move(self.board)

    def can_undo(self) -> bool:
        return bool(self.history) and self.status is GameStatus.PLAYING

    def reached_target(self) -> bool:
        return bool(np.any(self.board >= self.config.win_target))

    def move(self, direction: Union[Direction, str]) -> MoveResult:
        if self.status is not GameStatus.PLAYING:
            return MoveResult(moved=False)
        slid, gained, merged = slide(self.board, Direction(direction))
        if np.array_equal(slid, self.board):
            return MoveResult(moved=False)

        self.history.push(self.board, self.score, self.move_count)
        self.board = slid
        self.merged_tiles = merged
        self.new_tiles = np.zeros_like(self.new_tiles)
        self.score += gained
        self.move_count += 1
        self._spawn_tile()
        self._update_tiles()
        if self.score > self.best_score:
            self.best_score = self.score

        reached = self.reached_target()
        if reached and not self._win_acknowledged:
            self._finish(GameStatus.WON)
        elif not self.can_move():
            self._finish(GameStatus.LOST)
        self.notify()
        return MoveResult(moved=True, score_increase=gained, reached_2048=reached)

    def undo(self) -> bool:
        if self.status is not GameStatus.PLAYING:
            return False
        entry = self.history.pop()
        if entry is None:
            return False
        self.board = entry.board.copy()
        self.score = entry.score
        self.move_count = entry.move_count
        self.new_tiles = np.zeros_like(self.new_tiles)
        self.merged_tiles = np.zeros_like(self.merged_tiles)
        self.highest_tile = int(self.board.max())
        self.notify()
        return True

    def continue_game(self) -> bool:
        if self.status is not GameStatus.WON:
            return False
        self.status = GameStatus.PLAYING
        self.end_time = None
        self._win_acknowledged = True
        self.notify()
        return True

    def _spawn_tile(self) -> None:
        spot = add_random_tile(self.board, self.rng)
        if spot is not None:
            self.new_tiles[spot] = True

    def _update_tiles(self) -> None:
        self.highest_tile = int(self.board.max())
        if self.highest_tile > self.best_tile:
            self.best_tile = self.highest_tile

    def _finish(self, status: GameStatus) -> None:
        self.status = status
        self.end_time = self.clock()
        logger.info("tile merge %s: score=%d highest=%d moves=%d",
                    status.value, self.score, self.highest_tile, self.move_count)
