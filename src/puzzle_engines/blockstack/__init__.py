"""Falling-block stack engine.

Exports the engine and supporting classes:
- GameGrid: Grid representation and line clearing
- Piece: Tetromino piece with rotation table lookup
- TetrominoType: Enum of available piece types
- ScoringRules: Line-clear and drop scoring
- BlockStackState: State manager owning board, pieces and progression
- BlockStackEngine: Intent façade with tick-driven gravity
- FixedStepDriver: Synthetic-clock scheduler for tests and agents
"""

from .grid import GameGrid, PlacementResult
from .pieces import ROTATION_TABLE, WALL_KICKS, Piece, TetrominoType, spawn_piece
from .rules import ScoringRules, drop_speed_for_level, level_for_lines
from .state import BlockStackConfig, BlockStackSnapshot, BlockStackState, LockResult
from .core import Action, BlockStackEngine
from .scheduler import FixedStepDriver

__all__ = [
    "GameGrid",
    "PlacementResult",
    "ROTATION_TABLE",
    "WALL_KICKS",
    "Piece",
    "TetrominoType",
    "spawn_piece",
    "ScoringRules",
    "drop_speed_for_level",
    "level_for_lines",
    "BlockStackConfig",
    "BlockStackSnapshot",
    "BlockStackState",
    "LockResult",
    "Action",
    "BlockStackEngine",
    "FixedStepDriver",
]
