"""Pieces shared by every engine: status enum, observer base, rng and clock helpers."""

from .status import GameStatus
from .observer import Listener, Observable
from .sources import Clock, monotonic_ms, resolve_rng, wall_clock

__all__ = [
    "GameStatus",
    "Listener",
    "Observable",
    "Clock",
    "monotonic_ms",
    "resolve_rng",
    "wall_clock",
]
