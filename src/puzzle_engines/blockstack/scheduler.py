from __future__ import annotations

from .core import BlockStackEngine


class FixedStepDriver:
    """Deterministic scheduler port for the block-stack engine.

    Owns a synthetic millisecond clock and delivers one tick per step, so a
    test harness or an agent loop can advance gravity without wall time.
    """

    def __init__(self, engine: BlockStackEngine, step_ms: float = 50.0, now_ms: float = 0.0) -> None:
        if step_ms <= 0:
            raise ValueError("step_ms must be positive")
        self.engine = engine
        self.step_ms = float(step_ms)
        self.now_ms = float(now_ms)
        # Reads without an explicit timestamp follow the synthetic clock.
        engine.state.clock = self.clock

    def clock(self) -> float:
        return self.now_ms

    def start(self) -> bool:
        return self.engine.start(self.now_ms)

    def resume(self) -> bool:
        return self.engine.resume(self.now_ms)

    def advance(self, duration_ms: float) -> int:
        """Step the clock forward by ``duration_ms``; returns gravity steps taken."""
        drops = 0
        target = self.now_ms + duration_ms
        while self.now_ms + self.step_ms <= target:
            self.now_ms += self.step_ms
            if self.engine.tick(self.now_ms):
                drops += 1
        self.now_ms = target
        return drops

    def advance_until_drop(self, max_steps: int = 10_000) -> bool:
        for _ in range(max_steps):
            self.now_ms += self.step_ms
            if self.engine.tick(self.now_ms):
                return True
        return False
