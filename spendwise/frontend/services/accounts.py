from __future__ import annotations

import logging

from spendwise.core.data_models import Account, AccountsResponse, SyncResult
from spendwise.core.gateway import GatewayClient

logger = logging.getLogger("spendwise.frontend.accounts")

ACCOUNTS_KEY = ("accounts",)


class AccountService:
    def __init__(self, client: GatewayClient):
        self.client = client

    async def get_accounts(self) -> AccountsResponse:
        payload = await self.client.get("/accounts")
        response = AccountsResponse.model_validate(payload)
        logger.info("Fetched %d accounts", len(response.accounts))
        return response

    async def get_account(self, account_id: int) -> Account:
        payload = await self.client.get(f"/accounts/{account_id}")
        return Account.model_validate(payload.get("account", payload))

    async def sync_account(self, account_id: int) -> SyncResult:
        """Ask the backend to re-synchronize one account's transactions."""
        payload = await self.client.post(f"/accounts/{account_id}/sync")
        return SyncResult.model_validate(payload)
