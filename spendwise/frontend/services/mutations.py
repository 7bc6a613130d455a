from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar, Union

from spendwise.core.data_models import Category, CategoryInput, MessageResponse, SyncResult
from spendwise.core.errors import error_message

from ..state import KeyLike, QueryCache
from ..stores.ui import UIStore
from .accounts import ACCOUNTS_KEY, AccountService
from .categories import CATEGORIES_KEY, CategoryService
from .plaid import PlaidService
from .transactions import TRANSACTIONS_KEY, TransactionService

logger = logging.getLogger("spendwise.frontend.mutations")

T = TypeVar("T")
SuccessMessage = Union[str, Callable[[Any], str]]


async def run_mutation(
    action: Callable[[], Awaitable[T]],
    *,
    cache: QueryCache,
    ui: UIStore,
    invalidates: Iterable[KeyLike] = (),
    success_title: Optional[str] = None,
    success_message: SuccessMessage = "",
    error_title: str = "Error",
    error_fallback: str = "Something went wrong",
) -> Optional[T]:
    """
    Run a gateway mutation exactly once.

    On success the listed query keys are invalidated and, when a title is
    given, a success notification is raised. On failure the decoded message
    becomes an error notification and ``None`` is returned.
    """
    try:
        result = await action()
    except Exception as exc:  # noqa: BLE001
        message = error_message(exc, error_fallback)
        logger.error("%s: %s", error_title, message)
        ui.notify_error(error_title, message)
        return None

    keys = list(invalidates)
    if keys:
        cache.invalidate(*keys)
    if success_title:
        text = success_message(result) if callable(success_message) else success_message
        ui.notify_success(success_title, text)
    return result


class AccountActions:
    """Account and transaction mutations that surface their outcome as notifications."""

    def __init__(
        self,
        cache: QueryCache,
        ui: UIStore,
        accounts: AccountService,
        transactions: TransactionService,
        plaid: PlaidService,
    ):
        self.cache = cache
        self.ui = ui
        self.accounts = accounts
        self.transactions = transactions
        self.plaid = plaid

    async def sync_all(self) -> Optional[MessageResponse]:
        return await run_mutation(
            self.plaid.sync_accounts,
            cache=self.cache,
            ui=self.ui,
            invalidates=[ACCOUNTS_KEY, TRANSACTIONS_KEY],
            success_title="Sync Complete",
            success_message="All accounts have been synchronized.",
            error_title="Sync Failed",
            error_fallback="Failed to sync accounts",
        )

    async def sync_account(self, account_id: int) -> Optional[SyncResult]:
        return await run_mutation(
            lambda: self.accounts.sync_account(account_id),
            cache=self.cache,
            ui=self.ui,
            invalidates=[ACCOUNTS_KEY, TRANSACTIONS_KEY],
            success_title="Account Synced",
            success_message=lambda result: result.message or "Account has been synchronized.",
            error_title="Sync Failed",
            error_fallback="Failed to sync account",
        )

    async def categorize(
        self, transaction_id: int, category_id: int, confidence_score: float = 1.0
    ) -> Optional[MessageResponse]:
        return await run_mutation(
            lambda: self.transactions.categorize(transaction_id, category_id, confidence_score),
            cache=self.cache,
            ui=self.ui,
            invalidates=[TRANSACTIONS_KEY, CATEGORIES_KEY],
            success_title="Transaction Categorized",
            success_message="The transaction category has been updated.",
            error_title="Categorization Failed",
            error_fallback="Failed to categorize transaction",
        )


class CategoryActions:
    def __init__(self, cache: QueryCache, ui: UIStore, categories: CategoryService):
        self.cache = cache
        self.ui = ui
        self.categories = categories

    async def create(self, data: CategoryInput) -> Optional[Category]:
        return await run_mutation(
            lambda: self.categories.create_category(data),
            cache=self.cache,
            ui=self.ui,
            invalidates=[CATEGORIES_KEY],
            success_title="Category Created",
            success_message=lambda category: f"{category.name} has been added.",
            error_title="Create Failed",
            error_fallback="Failed to create category",
        )

    async def update(self, category_id: int, data: CategoryInput) -> Optional[Category]:
        return await run_mutation(
            lambda: self.categories.update_category(category_id, data),
            cache=self.cache,
            ui=self.ui,
            invalidates=[CATEGORIES_KEY, TRANSACTIONS_KEY],
            success_title="Category Updated",
            success_message=lambda category: f"{category.name} has been saved.",
            error_title="Update Failed",
            error_fallback="Failed to update category",
        )

    async def delete(self, category_id: int) -> Optional[MessageResponse]:
        return await run_mutation(
            lambda: self.categories.delete_category(category_id),
            cache=self.cache,
            ui=self.ui,
            invalidates=[CATEGORIES_KEY, TRANSACTIONS_KEY],
            success_title="Category Deleted",
            success_message=lambda response: response.message or "The category has been removed.",
            error_title="Delete Failed",
            error_fallback="Failed to delete category",
        )
