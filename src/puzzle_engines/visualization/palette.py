from __future__ import annotations

from typing import Dict, Tuple

Color = Tuple[int, int, int]

EMPTY = (20, 20, 26)
BACKGROUND = (10, 10, 14)

BLOCK_COLORS: Dict[int, Color] = {
    0: EMPTY,
    1: (0, 240, 240),  # I
    2: (240, 240, 0),  # O
    3: (160, 0, 240),  # T
    4: (0, 240, 0),    # S
    5: (240, 0, 0),    # Z
    6: (0, 0, 240),    # J
    7: (240, 160, 0),  # L
}

TILE_COLORS: Dict[int, Color] = {
    0: (205, 193, 180),
    2: (238, 228, 218),
    4: (237, 224, 200),
    8: (242, 177, 121),
    16: (245, 149, 99),
    32: (246, 124, 95),
    64: (246, 94, 59),
    128: (237, 207, 114),
    256: (237, 204, 97),
    512: (237, 200, 80),
    1024: (237, 197, 63),
    2048: (237, 194, 46),
}

MINE_COUNT_COLORS: Dict[int, Color] = {
    1: (25, 118, 210),
    2: (56, 142, 60),
    3: (211, 47, 47),
    4: (123, 31, 162),
    5: (255, 143, 0),
    6: (0, 151, 167),
    7: (66, 66, 66),
    8: (158, 158, 158),
}


def block_color(v: int) -> Color:
    # Negative values mark the falling piece; same hue as the locked cell.
    return BLOCK_COLORS.get(abs(v), (200, 200, 200))


def tile_color(v: int) -> Color:
    return TILE_COLORS.get(v, (60, 58, 50))
