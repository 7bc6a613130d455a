from __future__ import annotations

import logging
from typing import Any, Callable, List

logger = logging.getLogger("spendwise.frontend.stores")

Listener = Callable[[Any], None]


class Observable:
    """Minimal subscribe/notify support shared by the state containers."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, state: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:  # noqa: BLE001
                logger.exception("State listener %r failed", listener)
