from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from puzzle_engines.common import Clock, GameStatus, wall_clock

from .grid import Direction, slide
from .state import MoveResult, TileMergeConfig, TileMergeSnapshot, TileMergeState


@dataclass(frozen=True)
class TileMergeStats:
    score: int
    best_score: int
    move_count: int
    time_elapsed: int
    highest_tile: int
    empty_tiles: int


class TileMergeEngine:
    game_id = "tile_merge"

    def __init__(
        self,
        config: Optional[TileMergeConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Clock = wall_clock,
        best_score: int = 0,
        best_tile: int = 0,
    ) -> None:
        self.clock = clock
        self.state = TileMergeState(config, rng=rng, clock=clock, best_score=best_score, best_tile=best_tile)

    def get_state(self) -> TileMergeSnapshot:
        return self.state.get_state()

    def subscribe(self, listener: Callable[[TileMergeSnapshot], None]) -> None:
        self.state.subscribe(listener)

    def unsubscribe(self, listener: Callable[[TileMergeSnapshot], None]) -> None:
        self.state.unsubscribe(listener)

    def start_new_game(self) -> None:
        self.state.start_new_game()

    def restart(self) -> None:
        self.state.start_new_game()

    def move(self, direction: Union[Direction, str]) -> MoveResult:
        return self.state.move(direction)

    def undo(self) -> bool:
        return self.state.undo()

    def can_undo(self) -> bool:
        return self.state.can_undo()

    def continue_game(self) -> bool:
        """Keep playing on the same board after reaching the win target."""
        return self.state.continue_game()

    def possible_moves(self) -> List[Direction]:
        if self.state.status is not GameStatus.PLAYING:
            return []
        board = self.state.board
        return [d for d in Direction if not np.array_equal(slide(board, d)[0], board)]

    @property
    def is_game_over(self) -> bool:
        return self.state.status.is_terminal

    def elapsed_seconds(self) -> int:
        s = self.state
        if s.start_time is None:
            return 0
        end = s.end_time if s.end_time is not None else self.clock()
        return math.floor(end - s.start_time)

    def game_stats(self) -> TileMergeStats:
        s = self.state
        return TileMergeStats(
            score=s.score,
            best_score=s.best_score,
            move_count=s.move_count,
            time_elapsed=self.elapsed_seconds(),
            highest_tile=s.highest_tile,
            empty_tiles=int(np.count_nonzero(s.board == 0)),
        )

    def score_metadata(self) -> Dict[str, Any]:
        return {
            "move_count": self.state.move_count,
            "highest_tile": self.state.highest_tile,
            "time_elapsed": self.elapsed_seconds(),
            "status": self.state.status.value,
        }

    def final_score(self) -> int:
        return self.state.score

    def destroy(self) -> None:
        self.state.clear_listeners()
        self.state.history.clear()
