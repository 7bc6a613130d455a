from __future__ import annotations

import logging
from typing import Dict, Optional

from spendwise.core.data_models import (
    ConnectionStatus,
    DisconnectOptions,
    DisconnectResponse,
    ExchangeResponse,
    LinkTokenResponse,
    MessageResponse,
)
from spendwise.core.errors import UNEXPECTED_LINK_ERROR_MESSAGE, LinkWidgetError
from spendwise.core.gateway import GatewayClient

logger = logging.getLogger("spendwise.frontend.plaid")

LINK_TOKEN_KEY = ("plaid-link-token",)

LINK_ERROR_MESSAGES: Dict[str, str] = {
    "ITEM_LOGIN_REQUIRED": "Please reconnect your bank account. Your login credentials may have changed.",
    "INVALID_CREDENTIALS": "Invalid bank credentials. Please check your login information.",
    "INVALID_MFA": "Invalid verification code. Please try again.",
    "ITEM_LOCKED": "Your account is temporarily locked. Please contact your bank.",
    "ITEM_NOT_SUPPORTED": "This bank is not currently supported.",
    "INSUFFICIENT_CREDENTIALS": "Additional information required. Please complete the connection process.",
    "INVALID_SEND_METHOD": "Invalid verification method selected.",
    "RATE_LIMIT_EXCEEDED": "Too many requests. Please wait a moment and try again.",
    "INSTITUTION_DOWN": "Your bank is temporarily unavailable. Please try again later.",
    "INSTITUTION_NOT_RESPONDING": "Your bank is not responding. Please try again later.",
}


def link_error_message(error: Optional[LinkWidgetError]) -> str:
    """User-facing text for a bank-link widget error."""
    if error is None:
        return UNEXPECTED_LINK_ERROR_MESSAGE
    mapped = LINK_ERROR_MESSAGES.get(error.error_code or "")
    return mapped or error.display_message or UNEXPECTED_LINK_ERROR_MESSAGE


class PlaidService:
    """Gateway operations around the bank-linking provider."""

    def __init__(self, client: GatewayClient):
        self.client = client

    async def create_link_token(self) -> str:
        payload = await self.client.post("/plaid/link_token")
        return LinkTokenResponse.model_validate(payload).link_token

    async def exchange_public_token(self, public_token: str) -> ExchangeResponse:
        payload = await self.client.post("/plaid/exchange_token", {"public_token": public_token})
        response = ExchangeResponse.model_validate(payload)
        logger.info("Exchanged public token; %d account(s) linked", len(response.accounts))
        return response

    async def sync_accounts(self) -> MessageResponse:
        payload = await self.client.post("/plaid/sync_all_accounts")
        return MessageResponse.model_validate(payload)

    async def sync_account(self, account_id: int) -> MessageResponse:
        payload = await self.client.post(f"/plaid/sync/{account_id}")
        return MessageResponse.model_validate(payload)

    async def disconnect_account(self, account_id: int, options: Optional[DisconnectOptions] = None) -> DisconnectResponse:
        options = options or DisconnectOptions()
        payload = await self.client.delete(f"/plaid/accounts/{account_id}", params=options.to_params())
        response = DisconnectResponse.model_validate(payload)
        logger.info(
            "Disconnected account %s (transactions_removed=%d, classifications_removed=%d, deactivated=%s)",
            account_id,
            response.cleanup_summary.transactions_removed,
            response.cleanup_summary.classifications_removed,
            response.cleanup_summary.account_deactivated,
        )
        return response

    async def get_connection_status(self) -> ConnectionStatus:
        payload = await self.client.get("/plaid/status")
        return ConnectionStatus.model_validate(payload)
