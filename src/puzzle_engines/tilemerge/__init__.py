"""Tile-merge (2048) engine."""

from .grid import Direction, can_move, merge_line, slide, spawn_value
from .history import HistoryEntry, MoveHistory
from .state import MoveResult, TileCell, TileMergeConfig, TileMergeSnapshot, TileMergeState
from .core import TileMergeEngine, TileMergeStats

__all__ = [
    "Direction",
    "can_move",
    "merge_line",
    "slide",
    "spawn_value",
    "HistoryEntry",
    "MoveHistory",
    "MoveResult",
    "TileCell",
    "TileMergeConfig",
    "TileMergeSnapshot",
    "TileMergeState",
    "TileMergeEngine",
    "TileMergeStats",
]
