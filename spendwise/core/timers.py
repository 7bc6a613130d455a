"""Cancellable timers keyed by an owner-chosen identifier."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger("spendwise.core.timers")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Schedule ``callback`` on the running event loop after ``delay`` seconds."""
    return asyncio.get_running_loop().call_later(delay, callback)


class TimerRegistry:
    """
    Owns one pending timer per key.

    Scheduling a key that already has a timer replaces it; cancelling an
    unknown key is a no-op. A fired timer removes itself before running its
    callback, so callbacks may safely schedule or cancel timers.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None):
        self._scheduler: Scheduler = scheduler or asyncio_scheduler
        self._handles: Dict[Any, TimerHandle] = {}

    def schedule(self, key: Any, delay_ms: int, callback: Callable[[], None]) -> None:
        self.cancel(key)

        def _fire() -> None:
            self._handles.pop(key, None)
            try:
                callback()
            except Exception:  # noqa: BLE001
                logger.exception("Timer callback for %s failed", key)

        self._handles[key] = self._scheduler(delay_ms / 1000.0, _fire)

    def cancel(self, key: Any) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._handles):
            self.cancel(key)

    def pending(self, key: Any) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)
