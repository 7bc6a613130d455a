"""Shared pytest fixtures: payload builders, a manual timer scheduler and stubbed gateways."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from spendwise.core.data_models import Account, Transaction
from spendwise.core.gateway import GatewayClient
from spendwise.core.storage import MemoryStorage

BASE_URL = "http://gateway.test/api/v1"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeHandle:
    def __init__(self, scheduler: "FakeScheduler", due: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Timer scheduler driven by hand: ``advance(seconds)`` fires whatever is due."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: List[FakeHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self, self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [h for h in self.handles if not h.cancelled and h.due <= self.now]
        for handle in due:
            self.handles.remove(handle)
            handle.callback()

    @property
    def active(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled]


class RecordingTransport:
    """Routes requests to handlers keyed by ``(method, path)`` and records every call."""

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Any]] = None):
        self.routes: Dict[Tuple[str, str], Any] = dict(routes or {})
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path.replace("/api/v1", "", 1)
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": f"No route for {request.method} {path}"})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        return httpx.Response(200, json=route)

    def count(self, method: str, path: str) -> int:
        return sum(
            1
            for call in self.calls
            if call.method == method and call.url.path.replace("/api/v1", "", 1) == path
        )

    @property
    def mock(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_account(**overrides: Any) -> Account:
    payload = {"id": 1, "name": "Checking", "balance_current": 0.0, "account_type": "checking"}
    payload.update(overrides)
    return Account.model_validate(payload)


def make_transaction(**overrides: Any) -> Transaction:
    payload: Dict[str, Any] = {"id": 1, "amount": -10.0, "description": "Coffee", "date": "2024-03-10"}
    category = overrides.pop("category", None)
    if category is not None:
        payload["primary_category"] = {"id": sum(map(ord, category)), "name": category, "color": "#10B981"}
    payload.update(overrides)
    return Transaction.model_validate(payload)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def client(transport: RecordingTransport, storage: MemoryStorage) -> GatewayClient:
    return GatewayClient(base_url=BASE_URL, storage=storage, retry_backoff=0, transport=transport.mock)
