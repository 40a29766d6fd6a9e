from __future__ import annotations

import logging
from typing import Any, Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
Listener = Callable[[Any], None]


class Observable(Generic[S]):
    """Synchronous push-notification list.

    Listeners are called in registration order with a fresh snapshot after
    every successful mutation. Subclasses implement ``get_state``.
    """

    def __init__(self) -> None:
        self._listeners: List[Callable[[S], None]] = []

    def get_state(self) -> S:  # pragma: no cover - abstract
        raise NotImplementedError

    def subscribe(self, listener: Callable[[S], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[S], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("unsubscribe of unknown listener %r ignored", listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def clear_listeners(self) -> None:
        self._listeners = []

    def notify(self) -> None:
        if not self._listeners:
            return
        # Iterate over a copy so a listener may unsubscribe itself.
        for listener in list(self._listeners):
            listener(self.get_state())
