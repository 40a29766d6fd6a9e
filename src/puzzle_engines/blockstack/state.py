from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from puzzle_engines.common import Clock, GameStatus, Observable, monotonic_ms, resolve_rng

from .grid import GameGrid
from .pieces import WALL_KICKS, Piece, random_kind, spawn_piece
from .rules import ScoringRules, drop_speed_for_level, level_for_lines

logger = logging.getLogger(__name__)


@dataclass
class BlockStackConfig:
    width: int = 10
    height: int = 20
    initial_speed_ms: float = 1000.0
    speed_increase_factor: float = 0.9
    lines_per_level: int = 10
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width < 4 or self.height < 4:
            raise ValueError(f"board must be at least 4x4, got {self.width}x{self.height}")
        if self.initial_speed_ms <= 0:
            raise ValueError("initial_speed_ms must be positive")
        if not 0 < self.speed_increase_factor <= 1:
            raise ValueError("speed_increase_factor must be in (0, 1]")
        if self.lines_per_level <= 0:
            raise ValueError("lines_per_level must be positive")


@dataclass(frozen=True)
class LockResult:
    lines_cleared: int
    cleared_rows: Tuple[int, ...]
    line_score: int
    drop_bonus: int
    leveled_up: bool
    game_over: bool

    @property
    def total_score(self) -> int:
        return self.line_score + self.drop_bonus


@dataclass(frozen=True)
class BlockStackSnapshot:
    status: GameStatus
    board: np.ndarray
    current_piece: Optional[Piece]
    next_piece: Optional[Piece]
    score: int
    level: int
    lines_cleared: int
    drop_speed_ms: float
    last_drop_ms: float
    can_pause: bool
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    ghost_piece: Optional[Piece] = field(default=None, compare=False)
    last_lock: Optional[LockResult] = field(default=None, compare=False)

    def overlay(self) -> np.ndarray:
        """Board copy with the falling piece drawn as negative type values."""
        state = self.board.copy()
        if self.current_piece is not None and self.status is not GameStatus.LOST:
            h, w = state.shape
            for x, y in self.current_piece.cells():
                if 0 <= y < h and 0 <= x < w:
                    state[y, x] = -int(self.current_piece.kind)
        return state


class BlockStackState(Observable[BlockStackSnapshot]):
    """Owns the stack board, the falling piece and the score/level fields.

    Timestamps are milliseconds, passed in by the caller or read from the
    injected clock. The end time is stamped from the latest of them, so a
    game driven on a synthetic timeline stays on it. Gravity only advances
    through ``gravity_tick``; nothing here schedules itself.
    """

    def __init__(
        self,
        config: Optional[BlockStackConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        super().__init__()
        self.config = config or BlockStackConfig()
        self.rules = rules or ScoringRules()
        self.rng = resolve_rng(rng, self.config.random_seed)
        self.clock = clock
        self.grid = GameGrid(self.config.width, self.config.height)
        self.last_lock: Optional[LockResult] = None
        self._reset_fields()

    def _reset_fields(self) -> None:
        self.grid.reset()
        self.status = GameStatus.IDLE
        self.current_piece: Optional[Piece] = None
        self.next_piece: Optional[Piece] = None
        self.score = 0
        self.level = 1
        self.lines_cleared = 0
        self.drop_speed_ms = float(self.config.initial_speed_ms)
        self.last_drop_ms = 0.0
        self.can_pause = False
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.last_lock = None
        self._drop_bonus = 0
        # Latest timestamp seen by start, resume or gravity_tick.
        self._last_now: Optional[float] = None

    def get_state(self) -> BlockStackSnapshot:
        board = self.grid.clone_state()
        board.flags.writeable = False
        return BlockStackSnapshot(
            status=self.status,
            board=board,
            current_piece=self.current_piece,
            next_piece=self.next_piece,
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            drop_speed_ms=self.drop_speed_ms,
            last_drop_ms=self.last_drop_ms,
            can_pause=self.can_pause,
            start_time=self.start_time,
            end_time=self.end_time,
            ghost_piece=self.ghost_piece(),
            last_lock=self.last_lock,
        )

    # Queries

    def can_place(self, piece: Piece) -> bool:
        return self.grid.can_place(piece.cells())

    def ghost_piece(self) -> Optional[Piece]:
        if self.current_piece is None or self.status is GameStatus.LOST:
            return None
        ghost = self.current_piece
        while self.can_place(ghost.moved(0, 1)):
            ghost = ghost.moved(0, 1)
        return ghost

    def _timestamp(self, now_ms: Optional[float]) -> float:
        now = self.clock() if now_ms is None else now_ms
        self._last_now = now
        return now

    def _accepts_input(self) -> bool:
        return self.status is GameStatus.PLAYING and self.current_piece is not None

    # Lifecycle

    def start(self, now_ms: Optional[float] = None) -> bool:
        if self.status is not GameStatus.IDLE:
            return False
        now = self._timestamp(now_ms)
        self.status = GameStatus.PLAYING
        self.start_time = now
        self.last_drop_ms = now
        self.can_pause = True
        self._spawn_piece()
        logger.debug("block stack started at %.0f", now)
        self.notify()
        return True

    def pause(self) -> bool:
        if self.status is not GameStatus.PLAYING:
            return False
        self.status = GameStatus.PAUSED
        self.notify()
        return True

    def resume(self, now_ms: Optional[float] = None) -> bool:
        if self.status is not GameStatus.PAUSED:
            return False
        self.status = GameStatus.PLAYING
        # Paused time is not charged as drop time.
        self.last_drop_ms = self._timestamp(now_ms)
        self.notify()
        return True

    def restart(self) -> None:
        self._reset_fields()
        logger.debug("block stack restarted")
        self.notify()

    # Player intents

    def shift(self, dx: int) -> bool:
        if not self._accepts_input():
            return False
        moved = self.current_piece.moved(dx, 0)
        if not self.can_place(moved):
            return False
        self.current_piece = moved
        self.notify()
        return True

    def rotate(self, delta: int = 1) -> bool:
        if not self._accepts_input():
            return False
        rotated = self.current_piece.rotated(delta)
        if rotated.rotation == self.current_piece.rotation:
            return False
        candidates = [rotated] + [rotated.moved(dx, dy) for dx, dy in WALL_KICKS]
        for candidate in candidates:
            if self.can_place(candidate):
                self.current_piece = candidate
                self.notify()
                return True
        return False

    def soft_drop(self) -> bool:
        if not self._accepts_input():
            return False
        self._step_down(player_input=True)
        self.notify()
        return True

    def hard_drop(self) -> bool:
        if not self._accepts_input():
            return False
        ghost = self.ghost_piece()
        bonus = self.rules.hard_drop_score(ghost.y - self.current_piece.y)
        self.score += bonus
        self._drop_bonus += bonus
        self.current_piece = ghost
        self._lock_piece()
        self.notify()
        return True

    def gravity_tick(self, now_ms: Optional[float] = None) -> bool:
        if not self._accepts_input():
            return False
        now = self._timestamp(now_ms)
        if now - self.last_drop_ms < self.drop_speed_ms:
            return False
        self._step_down(player_input=False)
        self.last_drop_ms = now
        self.notify()
        return True

    # Transitions

    def _step_down(self, player_input: bool) -> bool:
        lowered = self.current_piece.moved(0, 1)
        if self.can_place(lowered):
            self.current_piece = lowered
            if player_input:
                self.score += self.rules.soft_drop_points
                self._drop_bonus += self.rules.soft_drop_points
            return True
        # No lock delay: a blocked descent locks immediately.
        self._lock_piece()
        return False

    def _spawn_piece(self) -> None:
        if self.next_piece is None:
            self.next_piece = spawn_piece(random_kind(self.rng), self.grid.width)
        self.current_piece = self.next_piece
        self.next_piece = spawn_piece(random_kind(self.rng), self.grid.width)
        self._drop_bonus = 0
        if not self.can_place(self.current_piece):
            self._end_game()

    def _lock_piece(self) -> LockResult:
        piece = self.current_piece
        assert piece is not None
        placement = self.grid.place(piece.cells(), int(piece.kind))
        lines = placement.lines_cleared
        line_score = self.rules.score_for_lines(lines, self.level)
        self.score += line_score
        leveled_up = False
        if lines:
            self.lines_cleared += lines
            new_level = level_for_lines(self.lines_cleared, self.config.lines_per_level)
            if new_level > self.level:
                self.level = new_level
                self.drop_speed_ms = drop_speed_for_level(
                    new_level, self.config.initial_speed_ms, self.config.speed_increase_factor
                )
                leveled_up = True
                logger.info("level up: %d (drop speed %.0f ms)", new_level, self.drop_speed_ms)
        drop_bonus = self._drop_bonus
        self._spawn_piece()
        self.last_lock = LockResult(
            lines_cleared=lines,
            cleared_rows=placement.cleared_rows,
            line_score=line_score,
            drop_bonus=drop_bonus,
            leveled_up=leveled_up,
            game_over=self.status is GameStatus.LOST,
        )
        return self.last_lock

    def _end_game(self) -> None:
        self.status = GameStatus.LOST
        self.end_time = self._last_now if self._last_now is not None else self.clock()
        self.can_pause = False
        logger.info("block stack over: score=%d level=%d lines=%d", self.score, self.level, self.lines_cleared)
