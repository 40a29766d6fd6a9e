from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from puzzle_engines.common import Clock, GameStatus, resolve_rng, wall_clock

from .state import (
    DIFFICULTY_CONFIGS,
    Difficulty,
    MinefieldConfig,
    MinefieldSnapshot,
    MinefieldState,
    custom_config,
)


@dataclass(frozen=True)
class MinefieldStats:
    total_cells: int
    revealed_cells: int
    flagged_cells: int
    remaining_cells: int
    accuracy: float
    time_elapsed: int


class MinefieldEngine:
    game_id = "minefield"

    def __init__(
        self,
        config: Optional[MinefieldConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        clock: Clock = wall_clock,
    ) -> None:
        self.clock = clock
        self.state = MinefieldState(config, rng=resolve_rng(rng, seed), clock=clock)

    def get_state(self) -> MinefieldSnapshot:
        return self.state.get_state()

    def subscribe(self, listener: Callable[[MinefieldSnapshot], None]) -> None:
        self.state.subscribe(listener)

    def unsubscribe(self, listener: Callable[[MinefieldSnapshot], None]) -> None:
        self.state.unsubscribe(listener)

    def reveal(self, row: int, col: int) -> bool:
        return self.state.reveal(row, col)

    def toggle_flag(self, row: int, col: int) -> bool:
        return self.state.toggle_flag(row, col)

    def can_auto_reveal(self, row: int, col: int) -> bool:
        return self.state.can_auto_reveal(row, col)

    def auto_reveal_neighbors(self, row: int, col: int) -> bool:
        """Chord: open every hidden neighbor of a satisfied numbered cell."""
        return self.state.auto_reveal_neighbors(row, col)

    def restart(self, config: Optional[MinefieldConfig] = None) -> None:
        self.state.restart(config)

    def load_layout(self, mine_positions: Iterable[Tuple[int, int]]) -> None:
        self.state.load_layout(mine_positions)

    def change_difficulty(self, difficulty: Union[Difficulty, str]) -> None:
        difficulty = Difficulty(difficulty)
        if difficulty is Difficulty.CUSTOM:
            raise ValueError("use set_custom_config for custom boards")
        self.state.restart(DIFFICULTY_CONFIGS[difficulty])

    def set_custom_config(self, rows: int, cols: int, mines: int) -> MinefieldConfig:
        config = custom_config(rows, cols, mines)
        self.state.restart(config)
        return config

    def elapsed_seconds(self) -> int:
        s = self.state
        if s.start_time is None:
            return 0
        end = s.end_time if s.end_time is not None else self.clock()
        return math.floor(end - s.start_time)

    def game_stats(self) -> MinefieldStats:
        s = self.state
        total = s.config.rows * s.config.cols
        revealed = s.revealed_safe_cell_count
        flagged = s.flagged_count
        accuracy = revealed / (revealed + flagged) * 100 if revealed > 0 else 0.0
        return MinefieldStats(
            total_cells=total,
            revealed_cells=revealed,
            flagged_cells=flagged,
            remaining_cells=total - revealed - flagged,
            accuracy=accuracy,
            time_elapsed=self.elapsed_seconds(),
        )

    @property
    def is_game_over(self) -> bool:
        return self.state.status.is_terminal

    def score_metadata(self) -> Dict[str, Any]:
        c = self.state.config
        return {
            "difficulty": c.difficulty.value,
            "time_elapsed": self.elapsed_seconds(),
            "mine_count": c.mine_count,
            "board_size": f"{c.rows}x{c.cols}",
            "status": self.state.status.value,
        }

    def final_score(self) -> int:
        # A lost game is recorded with zero points.
        return self.state.score if self.state.status is GameStatus.WON else 0

    def destroy(self) -> None:
        self.state.clear_listeners()
