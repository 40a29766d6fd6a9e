from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray
Coordinate = Tuple[int, int]


def _shape(rows: Sequence[Sequence[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    arr.flags.writeable = False
    return arr


# Rotation states in clockwise order. I, S and Z toggle between two states,
# O has a single state.
ROTATION_TABLE: Dict[TetrominoType, Tuple[Shape, ...]] = {
    TetrominoType.I: (
        _shape([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]]),
        _shape([[0, 0, 1, 0], [0, 0, 1, 0], [0, 0, 1, 0], [0, 0, 1, 0]]),
    ),
    TetrominoType.O: (
        _shape([[1, 1], [1, 1]]),
    ),
    TetrominoType.T: (
        _shape([[0, 1, 0], [1, 1, 1], [0, 0, 0]]),
        _shape([[0, 1, 0], [0, 1, 1], [0, 1, 0]]),
        _shape([[0, 0, 0], [1, 1, 1], [0, 1, 0]]),
        _shape([[0, 1, 0], [1, 1, 0], [0, 1, 0]]),
    ),
    TetrominoType.S: (
        _shape([[0, 1, 1], [1, 1, 0], [0, 0, 0]]),
        _shape([[0, 1, 0], [0, 1, 1], [0, 0, 1]]),
    ),
    TetrominoType.Z: (
        _shape([[1, 1, 0], [0, 1, 1], [0, 0, 0]]),
        _shape([[0, 0, 1], [0, 1, 1], [0, 1, 0]]),
    ),
    TetrominoType.J: (
        _shape([[1, 0, 0], [1, 1, 1], [0, 0, 0]]),
        _shape([[0, 1, 1], [0, 1, 0], [0, 1, 0]]),
        _shape([[0, 0, 0], [1, 1, 1], [0, 0, 1]]),
        _shape([[0, 1, 0], [0, 1, 0], [1, 1, 0]]),
    ),
    TetrominoType.L: (
        _shape([[0, 0, 1], [1, 1, 1], [0, 0, 0]]),
        _shape([[0, 1, 0], [0, 1, 0], [0, 1, 1]]),
        _shape([[0, 0, 0], [1, 1, 1], [1, 0, 0]]),
        _shape([[1, 1, 0], [0, 1, 0], [0, 1, 0]]),
    ),
}

# Offsets (dx, dy) tried in order when a rotation is blocked in place.
WALL_KICKS: Tuple[Coordinate, ...] = ((-1, 0), (1, 0), (0, -1), (-1, -1), (1, -1))


@dataclass(frozen=True)
class Piece:
    kind: TetrominoType
    x: int = 0
    y: int = 0
    rotation: int = 0

    @property
    def rotation_count(self) -> int:
        return len(ROTATION_TABLE[self.kind])

    def shape(self) -> Shape:
        states = ROTATION_TABLE[self.kind]
        return states[self.rotation % len(states)]

    def rotated(self, delta: int = 1) -> "Piece":
        return replace(self, rotation=(self.rotation + delta) % self.rotation_count)

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def cells_at(self, origin_x: int, origin_y: int) -> List[Coordinate]:
        s = self.shape()
        h, w = s.shape
        cells: List[Coordinate] = []
        for dy in range(h):
            for dx in range(w):
                if s[dy, dx]:
                    cells.append((origin_x + dx, origin_y + dy))
        return cells

    def cells(self) -> List[Coordinate]:
        return self.cells_at(self.x, self.y)


def spawn_piece(kind: TetrominoType, board_width: int) -> Piece:
    w = ROTATION_TABLE[kind][0].shape[1]
    return Piece(kind=kind, x=(board_width - w) // 2, y=0, rotation=0)


def random_kind(rng: random.Random) -> TetrominoType:
    # Independent uniform draw on every spawn, no bag.
    return rng.choice(list(TetrominoType))
