from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from puzzle_engines.common import GameStatus

logger = logging.getLogger(__name__)

MAX_SCORES_PER_GAME = 100


@dataclass(frozen=True)
class GameScore:
    game_id: str
    score: int
    timestamp: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class ScoreManager:
    """In-memory score store keeping the best records per game."""

    def __init__(self, clock: Callable[[], float] = time.time, limit: int = MAX_SCORES_PER_GAME) -> None:
        self.clock = clock
        self.limit = limit
        self.scores: Dict[str, List[GameScore]] = {}

    def save_score(self, game_id: str, score: int, metadata: Optional[Dict[str, Any]] = None) -> GameScore:
        if not isinstance(score, (int, float)) or score < 0:
            raise ValueError("Score must be a non-negative number")
        record = GameScore(game_id, score, self.clock(), dict(metadata or {}))
        entries = self.scores.setdefault(game_id, [])
        entries.append(record)
        # Stable sort keeps earlier records ahead on ties.
        entries.sort(key=lambda s: s.score, reverse=True)
        del entries[self.limit :]
        logger.debug("saved %s score %s", game_id, score)
        return record

    def get_high_score(self, game_id: str) -> Optional[GameScore]:
        entries = self.scores.get(game_id)
        return entries[0] if entries else None

    def get_all_scores(self, game_id: str) -> List[GameScore]:
        return list(self.scores.get(game_id, []))

    def clear_scores(self, game_id: str) -> None:
        self.scores.pop(game_id, None)


class ScoreRecorder:
    """Saves one score record each time an engine enters a terminal status.

    The engine must expose ``game_id``, ``subscribe``/``unsubscribe``,
    ``final_score()`` and ``score_metadata()``.
    """

    def __init__(self, engine: Any, store: ScoreManager) -> None:
        self.engine = engine
        self.store = store
        self.records: List[GameScore] = []
        self._last_status: GameStatus = engine.get_state().status
        engine.subscribe(self._on_state)

    def _on_state(self, snapshot: Any) -> None:
        status = snapshot.status
        entered_terminal = status.is_terminal and status is not self._last_status
        self._last_status = status
        if entered_terminal:
            self.records.append(
                self.store.save_score(self.engine.game_id, self.engine.final_score(), self.engine.score_metadata())
            )

    def detach(self) -> None:
        self.engine.unsubscribe(self._on_state)
