from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import numpy as np


@dataclass(frozen=True)
class HistoryEntry:
    board: np.ndarray
    score: int
    move_count: int


class MoveHistory:
    """Fixed-capacity undo stack; pushing past capacity evicts the oldest entry."""

    def __init__(self, capacity: int = 10) -> None:
        if capacity <= 0:
            raise ValueError("history capacity must be positive")
        self._entries: Deque[HistoryEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def push(self, board: np.ndarray, score: int, move_count: int) -> None:
        frozen = board.copy()
        frozen.flags.writeable = False
        self._entries.append(HistoryEntry(frozen, score, move_count))

    def pop(self) -> Optional[HistoryEntry]:
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()
