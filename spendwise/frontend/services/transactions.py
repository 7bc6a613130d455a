from __future__ import annotations

import logging
from typing import Optional

from spendwise.core.data_models import (
    MessageResponse,
    SyncResult,
    Transaction,
    TransactionFilters,
    TransactionsResponse,
)
from spendwise.core.gateway import GatewayClient

logger = logging.getLogger("spendwise.frontend.transactions")

TRANSACTIONS_KEY = ("transactions",)


class TransactionService:
    def __init__(self, client: GatewayClient):
        self.client = client

    async def get_transactions(self, filters: Optional[TransactionFilters] = None) -> TransactionsResponse:
        params = (filters or TransactionFilters()).to_params()
        payload = await self.client.get("/transactions", params=params or None)
        response = TransactionsResponse.model_validate(payload)
        logger.info("Fetched %d transactions (filters=%s)", len(response.transactions), params)
        return response

    async def get_transaction(self, transaction_id: int) -> Transaction:
        payload = await self.client.get(f"/transactions/{transaction_id}")
        return Transaction.model_validate(payload.get("transaction", payload))

    async def sync_transactions(self, account_id: Optional[int] = None) -> SyncResult:
        body = {"account_id": account_id} if account_id is not None else None
        payload = await self.client.post("/transactions/sync", body)
        return SyncResult.model_validate(payload)

    async def categorize(self, transaction_id: int, category_id: int, confidence_score: float = 1.0) -> MessageResponse:
        """Record a classification of the transaction into ``category_id``."""
        payload = await self.client.put(
            f"/transactions/{transaction_id}/categorize",
            {"category_id": category_id, "confidence_score": confidence_score},
        )
        return MessageResponse.model_validate(payload)

    async def get_uncategorized(self) -> TransactionsResponse:
        payload = await self.client.get("/transactions/uncategorized")
        return TransactionsResponse.model_validate(payload)

    async def get_by_category(self, category_id: int) -> TransactionsResponse:
        payload = await self.client.get(f"/transactions/by_category/{category_id}")
        return TransactionsResponse.model_validate(payload)
