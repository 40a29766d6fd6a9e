from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from puzzle_engines.common import GameStatus
from puzzle_engines.minefield import DIFFICULTY_CONFIGS, Difficulty, MinefieldConfig, MinefieldEngine, Visibility


HIDDEN_MARK = -1
MINE_MARK = 9


def _visible_board(engine: MinefieldEngine) -> np.ndarray:
    s = engine.state
    obs = np.full((s.config.rows, s.config.cols), HIDDEN_MARK, dtype=np.int8)
    revealed = s.board.visibility == Visibility.REVEALED
    obs[revealed] = s.board.counts[revealed]
    obs[revealed & s.board.mines] = MINE_MARK
    return obs


class MinefieldEnv(gym.Env):
    """Agent adapter for the minefield engine; one action reveals one cell."""

    metadata = {"render_modes": ["rgb_array"], "render_fps": 10}

    def __init__(self, config: Optional[MinefieldConfig] = None, render_mode: Optional[str] = None,
                 reveal_reward: float = 0.1,
                 win_reward: float = 10.0,
                 loss_penalty: float = -10.0,
                 invalid_action_penalty: float = -0.5) -> None:
        super().__init__()
        self.config = config or DIFFICULTY_CONFIGS[Difficulty.BEGINNER]
        self.engine = MinefieldEngine(self.config)
        self.render_mode = render_mode
        self.reveal_reward = float(reveal_reward)
        self.win_reward = float(win_reward)
        self.loss_penalty = float(loss_penalty)
        self.invalid_action_penalty = float(invalid_action_penalty)

        rows, cols = self.config.rows, self.config.cols
        self.observation_space = spaces.Box(low=HIDDEN_MARK, high=MINE_MARK, shape=(rows, cols), dtype=np.int8)
        self.action_space = spaces.Discrete(rows * cols)

    def _get_info(self) -> Dict[str, Any]:
        s = self.engine.state
        return {
            "action_mask": (s.board.visibility == Visibility.HIDDEN).reshape(-1),
            "revealed": s.revealed_safe_cell_count,
            "status": s.status.value,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.engine.state.rng.seed(seed)
        self.engine.restart(self.config)
        return _visible_board(self.engine), self._get_info()

    def step(self, action: int):
        row, col = divmod(int(action), self.config.cols)
        before = self.engine.state.revealed_safe_cell_count
        if self.engine.reveal(row, col):
            reward = self.reveal_reward * float(self.engine.state.revealed_safe_cell_count - before)
        else:
            reward = self.invalid_action_penalty
        status = self.engine.state.status
        if status is GameStatus.WON:
            reward += self.win_reward
        elif status is GameStatus.LOST:
            reward += self.loss_penalty
        terminated = status.is_terminal
        return _visible_board(self.engine), reward, terminated, False, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = _visible_board(self.engine)
        cell = 12
        h, w = board.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = int(board[y, x])
                if v == HIDDEN_MARK:
                    color = (90, 90, 100)
                elif v == MINE_MARK:
                    color = (220, 40, 40)
                else:
                    color = (200 - v * 20, 200 - v * 20, 210)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        self.engine.destroy()
