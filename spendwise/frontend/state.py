from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple, Union

from cachetools import TTLCache
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from spendwise.core.errors import NetworkError

from .config import settings

logger = logging.getLogger("spendwise.frontend.state")

QueryKey = Tuple[Hashable, ...]
KeyLike = Union[str, QueryKey]
Loader = Callable[[], Awaitable[Any]]


def _as_key(key: KeyLike) -> QueryKey:
    return (key,) if isinstance(key, str) else tuple(key)


class QueryCache:
    """
    Client-side cache of gateway reads, keyed by a stable query identity.

    Mutations never patch cached data; they invalidate keys so the next read
    reloads from the gateway. Concurrent reads of the same key share a single
    in-flight request until the key is invalidated; a load that was
    invalidated while running still answers its own callers but is neither
    stored nor joined by later reads.
    """

    def __init__(
        self,
        maxsize: Optional[int] = None,
        stale_time: Optional[float] = None,
        retry_backoff: Optional[float] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = float(settings.query_stale_time if stale_time is None else stale_time)
        self.retry_backoff = settings.retry_backoff if retry_backoff is None else retry_backoff
        self._timer = timer
        self._entries: TTLCache = TTLCache(
            maxsize=maxsize or settings.query_cache_size,
            ttl=max(self.stale_time, 0.001),
            timer=timer,
        )
        self._inflight: Dict[QueryKey, asyncio.Future] = {}

    def get(self, key: KeyLike, stale_time: Optional[float] = None) -> Optional[Any]:
        """Return the cached value when it is still fresh."""
        entry = self._entries.get(_as_key(key))
        if entry is None:
            return None
        value, fetched_at = entry
        limit = self.stale_time if stale_time is None else stale_time
        if self._timer() - fetched_at >= limit:
            return None
        return value

    def set(self, key: KeyLike, value: Any) -> None:
        self._entries[_as_key(key)] = (value, self._timer())

    async def fetch(
        self,
        key: KeyLike,
        loader: Loader,
        stale_time: Optional[float] = None,
        retry: int = 0,
    ) -> Any:
        """Serve ``key`` from cache or load it, retrying transient failures ``retry`` times."""
        query_key = _as_key(key)
        cached = self.get(query_key, stale_time=stale_time)
        if cached is not None:
            logger.debug("Serving %s from query cache", query_key)
            return cached

        inflight = self._inflight.get(query_key)
        if inflight is None:
            inflight = asyncio.ensure_future(self._load(query_key, loader, retry))
            self._inflight[query_key] = inflight
        return await asyncio.shield(inflight)

    def _is_current(self, key: QueryKey, task: Optional[asyncio.Future]) -> bool:
        return task is not None and self._inflight.get(key) is task

    async def _load(self, key: QueryKey, loader: Loader, retry: int) -> Any:
        task = asyncio.current_task()
        try:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max(retry, 0) + 1),
                wait=wait_exponential(multiplier=self.retry_backoff, max=5),
                retry=retry_if_exception(lambda exc: isinstance(exc, NetworkError)),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    value = await loader()
            if self._is_current(key, task):
                self.set(key, value)
            else:
                logger.info("Query %s was invalidated while loading; result not cached", key)
            return value
        finally:
            if self._is_current(key, task):
                del self._inflight[key]

    def invalidate(self, *prefixes: KeyLike) -> int:
        """Drop every entry and in-flight load whose key starts with one of ``prefixes``."""
        normalized = [_as_key(prefix) for prefix in prefixes]

        def matches(key: QueryKey) -> bool:
            return any(key[: len(prefix)] == prefix for prefix in normalized)

        removed = 0
        for key in list(self._entries.keys()):
            if matches(key):
                self._entries.pop(key, None)
                removed += 1
        for key in [key for key in self._inflight if matches(key)]:
            del self._inflight[key]
        logger.info("Invalidated %d cached queries for %s", removed, normalized)
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._inflight.clear()

    def inflight_count(self) -> int:
        return len(self._inflight)
