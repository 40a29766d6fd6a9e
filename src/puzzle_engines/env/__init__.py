"""Gymnasium environments exposing the engines to agents."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="Minefield-9x9-v0",
    entry_point="puzzle_engines.env.minefield_env:MinefieldEnv",
)

register(
    id="TileMerge-4x4-v0",
    entry_point="puzzle_engines.env.tilemerge_env:TileMergeEnv",
)

# Gravity advances on a fixed 100 ms step after every action
register(
    id="BlockStack-10x20-v0",
    entry_point="puzzle_engines.env.blockstack_env:BlockStackEnv",
)

__all__ = ["Minefield-9x9-v0", "TileMerge-4x4-v0", "BlockStack-10x20-v0"]
