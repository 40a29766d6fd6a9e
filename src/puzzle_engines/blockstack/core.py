from __future__ import annotations

import random
from enum import IntEnum
from typing import Any, Callable, Dict, Optional

from puzzle_engines.common import Clock, GameStatus, monotonic_ms

from .pieces import Piece
from .rules import ScoringRules
from .state import BlockStackConfig, BlockStackSnapshot, BlockStackState


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    ROTATE_CCW = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    NONE = 6


class BlockStackEngine:
    """Falling-block engine driven by player intents and external ticks.

    The host calls ``tick(now_ms)`` periodically (at least every 50 ms to
    avoid skipped drops at the top speed); the engine never schedules itself.
    """

    game_id = "block_stack"

    def __init__(
        self,
        config: Optional[BlockStackConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.state = BlockStackState(config, rules, rng=rng, clock=clock)

    @property
    def config(self) -> BlockStackConfig:
        return self.state.config

    def get_state(self) -> BlockStackSnapshot:
        return self.state.get_state()

    def subscribe(self, listener: Callable[[BlockStackSnapshot], None]) -> None:
        self.state.subscribe(listener)

    def unsubscribe(self, listener: Callable[[BlockStackSnapshot], None]) -> None:
        self.state.unsubscribe(listener)

    def start(self, now_ms: Optional[float] = None) -> bool:
        return self.state.start(now_ms)

    def pause(self) -> bool:
        return self.state.pause()

    def resume(self, now_ms: Optional[float] = None) -> bool:
        return self.state.resume(now_ms)

    def toggle_pause(self, now_ms: Optional[float] = None) -> bool:
        if self.state.status is GameStatus.PAUSED:
            return self.resume(now_ms)
        return self.pause()

    def restart(self) -> None:
        self.state.restart()

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Scheduler entry point; returns True when gravity advanced."""
        return self.state.gravity_tick(now_ms)

    def move_left(self) -> bool:
        return self.state.shift(-1)

    def move_right(self) -> bool:
        return self.state.shift(1)

    def rotate(self, clockwise: bool = True) -> bool:
        return self.state.rotate(1 if clockwise else -1)

    def soft_drop(self) -> bool:
        return self.state.soft_drop()

    def hard_drop(self) -> bool:
        return self.state.hard_drop()

    def step(self, action: Action) -> bool:
        if action == Action.LEFT:
            return self.move_left()
        elif action == Action.RIGHT:
            return self.move_right()
        elif action == Action.ROTATE_CW:
            return self.rotate(clockwise=True)
        elif action == Action.ROTATE_CCW:
            return self.rotate(clockwise=False)
        elif action == Action.SOFT_DROP:
            return self.soft_drop()
        elif action == Action.HARD_DROP:
            return self.hard_drop()
        return False

    def ghost_piece(self) -> Optional[Piece]:
        return self.state.ghost_piece()

    @property
    def is_game_over(self) -> bool:
        return self.state.status is GameStatus.LOST

    def score_metadata(self) -> Dict[str, Any]:
        s = self.state
        elapsed = 0.0
        if s.start_time is not None and s.end_time is not None:
            elapsed = s.end_time - s.start_time
        return {
            "level": s.level,
            "lines": s.lines_cleared,
            "time_elapsed_ms": elapsed,
        }

    def final_score(self) -> int:
        return self.state.score

    def destroy(self) -> None:
        self.state.clear_listeners()
