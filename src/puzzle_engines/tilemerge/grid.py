from __future__ import annotations

import random
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


SPAWN_FOUR_PROBABILITY = 0.1


def merge_line(line: Sequence[int]) -> Tuple[List[int], int, List[bool]]:
    """Slide one line toward index 0 and merge equal neighbors.

    Each tile merges at most once per pass and only with the tile
    immediately after it, so ``[2, 2, 2]`` becomes ``[4, 2, 0]``.
    Returns the new line, the points earned and a per-index merged flag.
    """
    tiles = [int(v) for v in line if v != 0]
    values: List[int] = []
    merged: List[bool] = []
    score = 0
    i = 0
    while i < len(tiles):
        if i + 1 < len(tiles) and tiles[i] == tiles[i + 1]:
            value = tiles[i] * 2
            values.append(value)
            merged.append(True)
            score += value
            i += 2
        else:
            values.append(tiles[i])
            merged.append(False)
            i += 1
    padding = len(line) - len(values)
    return values + [0] * padding, score, merged + [False] * padding


def _oriented(board: np.ndarray, direction: Direction) -> np.ndarray:
    # View of the board where every line slides toward column 0.
    if direction is Direction.LEFT:
        return board
    if direction is Direction.RIGHT:
        return board[:, ::-1]
    if direction is Direction.UP:
        return board.T
    return board.T[:, ::-1]


def _restored(oriented: np.ndarray, direction: Direction) -> np.ndarray:
    if direction is Direction.LEFT:
        return oriented
    if direction is Direction.RIGHT:
        return oriented[:, ::-1]
    if direction is Direction.UP:
        return oriented.T
    return oriented[:, ::-1].T


def slide(board: np.ndarray, direction: Direction) -> Tuple[np.ndarray, int, np.ndarray]:
    """Apply a move to a copy of ``board``.

    Returns ``(new_board, score_gained, merged_mask)``.
    """
    direction = Direction(direction)
    src = _oriented(board, direction)
    out = np.zeros_like(src)
    merged = np.zeros(src.shape, dtype=np.bool_)
    score = 0
    for i, line in enumerate(src):
        values, gained, flags = merge_line(line)
        out[i, :] = values
        merged[i, :] = flags
        score += gained
    return (
        np.ascontiguousarray(_restored(out, direction)),
        score,
        np.ascontiguousarray(_restored(merged, direction)),
    )


def empty_cells(board: np.ndarray) -> List[Tuple[int, int]]:
    rows, cols = np.nonzero(board == 0)
    return [(int(r), int(c)) for r, c in zip(rows, cols)]


def can_move(board: np.ndarray) -> bool:
    if np.any(board == 0):
        return True
    if np.any(board[:, :-1] == board[:, 1:]):
        return True
    return bool(np.any(board[:-1, :] == board[1:, :]))


def spawn_value(rng: random.Random) -> int:
    return 4 if rng.random() < SPAWN_FOUR_PROBABILITY else 2


def add_random_tile(board: np.ndarray, rng: random.Random) -> Optional[Tuple[int, int]]:
    """Place a 2 or 4 on a uniformly chosen empty cell, in place."""
    empty = empty_cells(board)
    if not empty:
        return None
    row, col = rng.choice(empty)
    board[row, col] = spawn_value(rng)
    return row, col
