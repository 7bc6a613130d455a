from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from spendwise.core.aggregator import DashboardSummary, build_dashboard
from spendwise.core.data_models import (
    AccountsResponse,
    CategoriesResponse,
    Transaction,
    TransactionFilters,
    TransactionsResponse,
)

from ..state import QueryCache
from .accounts import ACCOUNTS_KEY, AccountService
from .categories import CATEGORIES_KEY, CategoryService
from .transactions import TRANSACTIONS_KEY, TransactionService

logger = logging.getLogger("spendwise.frontend.dashboard")

DASHBOARD_PAGE_SIZE = 500


def dashboard_filters(month: date) -> TransactionFilters:
    """The selected month plus the one before it, which the trend compares against."""
    first_day = month.replace(day=1)
    return TransactionFilters(
        start_date=first_day - relativedelta(months=1),
        end_date=first_day + relativedelta(months=1, days=-1),
        per_page=DASHBOARD_PAGE_SIZE,
    )


class DashboardService:
    def __init__(
        self,
        cache: QueryCache,
        accounts: AccountService,
        transactions: TransactionService,
        categories: CategoryService,
    ):
        self.cache = cache
        self.accounts = accounts
        self.transactions = transactions
        self.categories = categories

    async def load_accounts(self) -> AccountsResponse:
        return await self.cache.fetch(ACCOUNTS_KEY, self.accounts.get_accounts)

    async def load_transactions(self, filters: Optional[TransactionFilters] = None) -> TransactionsResponse:
        filters = filters or TransactionFilters()
        return await self.cache.fetch(
            TRANSACTIONS_KEY + filters.cache_key(),
            lambda: self.transactions.get_transactions(filters),
        )

    async def load_all_transactions(self, filters: Optional[TransactionFilters] = None) -> List[Transaction]:
        """Every page of ``filters``; each page is cached under its own key."""
        filters = filters or TransactionFilters()
        first = await self.load_transactions(filters.model_copy(update={"page": 1}))
        total_pages = first.pagination.total_pages
        rest = await asyncio.gather(
            *(self.load_transactions(filters.model_copy(update={"page": page})) for page in range(2, total_pages + 1))
        )
        if total_pages > 1:
            logger.info("Loaded %d pages of transactions for %s", total_pages, filters.cache_key())
        transactions = list(first.transactions)
        for response in rest:
            transactions.extend(response.transactions)
        return transactions

    async def load_categories(self) -> CategoriesResponse:
        return await self.cache.fetch(CATEGORIES_KEY, self.categories.get_categories)

    async def get_dashboard(self, month: Optional[date] = None) -> DashboardSummary:
        month = (month or date.today()).replace(day=1)
        accounts, transactions, categories = await asyncio.gather(
            self.load_accounts(),
            self.load_all_transactions(dashboard_filters(month)),
            self.load_categories(),
        )
        logger.info(
            "Building dashboard for %s from %d accounts and %d transactions",
            month.strftime("%Y-%m"),
            len(accounts.accounts),
            len(transactions),
        )
        return build_dashboard(accounts.accounts, transactions, month, categories.categories)
