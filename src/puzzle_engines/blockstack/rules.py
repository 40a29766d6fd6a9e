from __future__ import annotations

import math
from dataclasses import dataclass


MIN_DROP_SPEED_MS = 50.0


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    soft_drop_points: int = 1
    hard_drop_points: int = 2

    def score_for_lines(self, lines: int, level: int = 1) -> int:
        if not 1 <= lines <= len(self.line_clear_scores):
            return 0
        return self.line_clear_scores[lines - 1] * level

    def hard_drop_score(self, distance: int) -> int:
        return self.hard_drop_points * max(0, distance)


def level_for_lines(lines: int, lines_per_level: int) -> int:
    return math.floor(lines / lines_per_level) + 1


def drop_speed_for_level(level: int, initial_speed_ms: float, speed_increase_factor: float) -> float:
    return max(MIN_DROP_SPEED_MS, initial_speed_ms * speed_increase_factor ** (level - 1))
