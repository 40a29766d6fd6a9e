from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from puzzle_engines.blockstack import Action, BlockStackConfig, BlockStackEngine, FixedStepDriver
from puzzle_engines.common import GameStatus
from puzzle_engines.visualization.palette import block_color


class BlockStackEnv(gym.Env):
    """Agent adapter for the block-stack engine.

    Each step applies one intent and then advances a synthetic clock by
    ``frame_ms``, so gravity runs on a fixed-step schedule.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 10}

    def __init__(self, config: Optional[BlockStackConfig] = None, render_mode: Optional[str] = None,
                 frame_ms: float = 100.0,
                 max_episode_steps: int = 10000,
                 reward_weights: Optional[Dict[str, float]] = None) -> None:
        super().__init__()
        self.render_mode = render_mode
        self.frame_ms = float(frame_ms)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            "score": 0.01,     # per engine point
            "holes": 0.1,      # penalize holes created
            "height": 0.02,    # penalize max height increase
            "terminal": 1.0,   # penalty on game over
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        self._driver: Optional[FixedStepDriver] = None
        self.engine = BlockStackEngine(config, clock=self._clock)
        self._driver = FixedStepDriver(self.engine, step_ms=self.frame_ms)
        h, w = self.engine.config.height, self.engine.config.width

        # Board overlay: locked cells 1..7, falling piece -1..-7
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-7, high=7, shape=(h, w), dtype=np.int8),
                "next_piece": spaces.Discrete(8),
            }
        )
        self.action_space = spaces.Discrete(len(Action))
        self._steps = 0

    def _clock(self) -> float:
        return self._driver.now_ms if self._driver is not None else 0.0

    def _get_obs(self) -> Dict[str, Any]:
        snapshot = self.engine.get_state()
        next_piece = int(snapshot.next_piece.kind) if snapshot.next_piece is not None else 0
        return {"board": snapshot.overlay().astype(np.int8), "next_piece": next_piece}

    def _get_info(self) -> Dict[str, Any]:
        s = self.engine.state
        return {"score": s.score, "lines": s.lines_cleared, "level": s.level, "steps": self._steps}

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.engine.state.rng.seed(seed)
        self.engine.restart()
        self._driver.now_ms = 0.0
        self._driver.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        grid = self.engine.state.grid
        score_before = self.engine.state.score
        holes_before = grid.count_holes()
        height_before = grid.get_max_height()

        self.engine.step(Action(int(action)))
        if self.engine.state.status is GameStatus.PLAYING:
            self._driver.advance(self.frame_ms)
        self._steps += 1

        grid = self.engine.state.grid
        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(self.engine.state.score - score_before),
            "holes": -self.reward_weights["holes"] * float(max(0, grid.count_holes() - holes_before)),
            "height": -self.reward_weights["height"] * float(max(0, grid.get_max_height() - height_before)),
        }
        terminated = self.engine.is_game_over
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = -self.reward_weights["terminal"]

        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), float(sum(reward_components.values())), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = self.engine.get_state().overlay()
        cell = 12
        h, w = board.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = block_color(int(board[y, x]))
        return img

    def close(self) -> None:
        self.engine.destroy()
