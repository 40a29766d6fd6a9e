from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from puzzle_engines.common import GameStatus
from puzzle_engines.tilemerge import Direction, TileMergeConfig, TileMergeEngine
from puzzle_engines.visualization.palette import tile_color


DIRECTIONS: List[Direction] = [Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT]


def _compute_action_mask(engine: TileMergeEngine) -> np.ndarray:
    possible = set(engine.possible_moves())
    return np.array([d in possible for d in DIRECTIONS], dtype=np.bool_)


class TileMergeEnv(gym.Env):
    """Agent adapter for the tile-merge engine.

    Observations are log2 tile exponents (0 for empty). The episode ends on a
    win or a loss; winning does not call ``continue_game``.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 10}

    def __init__(self, config: Optional[TileMergeConfig] = None, render_mode: Optional[str] = None,
                 invalid_action_penalty: float = -1.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.engine = TileMergeEngine(config)
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.max_episode_steps = int(max_episode_steps)

        n = self.engine.state.config.board_size
        self.observation_space = spaces.Box(low=0, high=31, shape=(n, n), dtype=np.int8)
        self.action_space = spaces.Discrete(len(DIRECTIONS))
        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        board = self.engine.state.board
        exponents = np.zeros(board.shape, dtype=np.int8)
        nonzero = board > 0
        exponents[nonzero] = np.log2(board[nonzero]).astype(np.int8)
        return exponents

    def _get_info(self) -> Dict[str, Any]:
        s = self.engine.state
        return {
            "action_mask": _compute_action_mask(self.engine),
            "score": s.score,
            "highest_tile": s.highest_tile,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.engine.state.rng.seed(seed)
        self.engine.start_new_game()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        result = self.engine.move(DIRECTIONS[int(action)])
        self._steps += 1
        reward = float(result.score_increase) if result.moved else self.invalid_action_penalty
        status = self.engine.state.status
        terminated = status in (GameStatus.WON, GameStatus.LOST)
        truncated = self._steps >= self.max_episode_steps
        info = self._get_info()
        info["moved"] = result.moved
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = self.engine.state.board
        cell = 24
        n = board.shape[0]
        img = np.zeros((n * cell, n * cell, 3), dtype=np.uint8)
        for y in range(n):
            for x in range(n):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = tile_color(int(board[y, x]))
        return img

    def close(self) -> None:
        self.engine.destroy()
