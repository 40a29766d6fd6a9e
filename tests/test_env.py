import gymnasium as gym
import numpy as np

import puzzle_engines.env  # noqa: F401  (registers environments)
from puzzle_engines.blockstack import Action
from puzzle_engines.env.blockstack_env import BlockStackEnv
from puzzle_engines.env.minefield_env import HIDDEN_MARK, MinefieldEnv
from puzzle_engines.env.tilemerge_env import TileMergeEnv


def test_registered_ids_make_envs():
    for env_id in ("Minefield-9x9-v0", "TileMerge-4x4-v0", "BlockStack-10x20-v0"):
        env = gym.make(env_id)
        obs, _ = env.reset(seed=0)
        assert env.observation_space.contains(obs)
        env.close()


def test_block_stack_env_runs_to_game_over():
    env = BlockStackEnv(render_mode="rgb_array")
    obs, info = env.reset(seed=3)
    assert obs["board"].shape == (20, 10)
    assert (obs["board"] < 0).sum() == 4
    assert 1 <= obs["next_piece"] <= 7
    terminated = False
    for _ in range(500):
        obs, reward, terminated, truncated, info = env.step(int(Action.HARD_DROP))
        assert env.observation_space.contains(obs)
        if terminated:
            break
    assert terminated
    assert info["reward_components"]["terminal"] == -1.0
    assert env.render().shape == (240, 120, 3)
    env.close()


def test_block_stack_env_gravity_advances_per_frame():
    env = BlockStackEnv(frame_ms=500)
    env.reset(seed=1)
    y = env.engine.get_state().current_piece.y
    env.step(int(Action.NONE))
    assert env.engine.get_state().current_piece.y == y
    env.step(int(Action.NONE))
    assert env.engine.get_state().current_piece.y == y + 1


def test_tile_merge_env_observes_exponents():
    env = TileMergeEnv()
    obs, info = env.reset(seed=5)
    assert obs.dtype == np.int8
    assert set(np.unique(obs).tolist()) <= {0, 1, 2}
    assert int((obs > 0).sum()) == 2
    assert info["action_mask"].any()

    action = int(np.flatnonzero(info["action_mask"])[0])
    obs, reward, terminated, truncated, info = env.step(action)
    assert info["moved"]
    assert reward >= 0
    assert not terminated and not truncated


def test_tile_merge_env_penalizes_invalid_moves():
    env = TileMergeEnv(invalid_action_penalty=-2.0)
    env.reset(seed=0)
    env.engine.state.board = np.array([[2, 0, 0, 0], [0] * 4, [0] * 4, [0] * 4], dtype=np.int64)
    # Index 2 is LEFT; the lone tile is already against the left wall.
    _, reward, _, _, info = env.step(2)
    assert not info["moved"]
    assert reward == -2.0


def test_minefield_env_reveal_and_mask():
    env = MinefieldEnv()
    obs, info = env.reset(seed=2)
    assert (obs == HIDDEN_MARK).all()
    assert info["action_mask"].all()

    obs, reward, terminated, _, info = env.step(40)
    assert obs[4, 4] == 0
    assert reward > 0
    assert not info["action_mask"][40]

    _, reward, _, _, _ = env.step(40)
    assert reward == env.invalid_action_penalty
