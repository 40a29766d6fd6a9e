"""Minefield (mine-sweep) engine."""

from .board import Cell, MineBoard, Visibility
from .state import (
    DIFFICULTY_CONFIGS,
    DIFFICULTY_MULTIPLIERS,
    Difficulty,
    MinefieldConfig,
    MinefieldSnapshot,
    MinefieldState,
    custom_config,
    score_for,
)
from .core import MinefieldEngine, MinefieldStats

__all__ = [
    "Cell",
    "MineBoard",
    "Visibility",
    "DIFFICULTY_CONFIGS",
    "DIFFICULTY_MULTIPLIERS",
    "Difficulty",
    "MinefieldConfig",
    "MinefieldSnapshot",
    "MinefieldState",
    "custom_config",
    "score_for",
    "MinefieldEngine",
    "MinefieldStats",
]
