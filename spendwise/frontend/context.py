from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
from fastapi import Request

from spendwise.core.gateway import GatewayClient
from spendwise.core.storage import ClientStorage, MemoryStorage, SqliteStorage
from spendwise.core.timers import Scheduler

from .config import settings
from .services.accounts import AccountService
from .services.categories import CategoryService
from .services.dashboard import DashboardService
from .services.link_flow import AccountLinkController, LinkWidget
from .services.mutations import AccountActions, CategoryActions
from .services.plaid import PlaidService
from .services.transactions import TransactionService
from .state import QueryCache
from .stores.session import SessionState, SessionStatus, SessionStore
from .stores.ui import UIStore

logger = logging.getLogger("spendwise.frontend.context")


@dataclass
class AppContext:
    """Everything one running client owns. State containers are never shared between contexts."""

    client: GatewayClient
    storage: ClientStorage
    cache: QueryCache
    accounts: AccountService
    transactions: TransactionService
    categories: CategoryService
    plaid: PlaidService
    dashboard: DashboardService
    session: SessionStore
    ui: UIStore
    account_actions: AccountActions
    category_actions: CategoryActions
    link: AccountLinkController

    async def aclose(self) -> None:
        self.ui.clear_notifications()
        await self.client.close()


def _default_storage() -> ClientStorage:
    if settings.storage_path:
        logger.info("Persisting client storage to %s", settings.storage_path)
        return SqliteStorage(settings.storage_path)
    return MemoryStorage()


def build_context(
    storage: Optional[ClientStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    scheduler: Optional[Scheduler] = None,
    widget: Optional[LinkWidget] = None,
    system_theme: Optional[Callable[[], Optional[str]]] = None,
    retry_backoff: Optional[float] = None,
) -> AppContext:
    storage = storage if storage is not None else _default_storage()
    backoff = settings.retry_backoff if retry_backoff is None else retry_backoff
    client = GatewayClient(
        base_url=settings.api_url,
        storage=storage,
        timeout=httpx.Timeout(settings.request_timeout, connect=5.0),
        query_retries=settings.query_retries,
        retry_backoff=backoff,
        transport=transport,
    )
    cache = QueryCache(retry_backoff=backoff)
    accounts = AccountService(client)
    transactions = TransactionService(client)
    categories = CategoryService(client)
    plaid = PlaidService(client)
    ui = UIStore(storage=storage, scheduler=scheduler, system_theme=system_theme)
    session = SessionStore(client)

    def _drop_cache_on_sign_out(state: SessionState) -> None:
        # Cached reads belong to the user that fetched them.
        if state.status is SessionStatus.ANONYMOUS:
            cache.clear()

    session.subscribe(_drop_cache_on_sign_out)

    return AppContext(
        client=client,
        storage=storage,
        cache=cache,
        accounts=accounts,
        transactions=transactions,
        categories=categories,
        plaid=plaid,
        dashboard=DashboardService(cache, accounts, transactions, categories),
        session=session,
        ui=ui,
        account_actions=AccountActions(cache, ui, accounts, transactions, plaid),
        category_actions=CategoryActions(cache, ui, categories),
        link=AccountLinkController(plaid, cache, ui, widget=widget),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context
