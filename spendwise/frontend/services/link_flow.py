"""
Bank-account link flow.

Drives the provider widget through ``idle -> token_requested -> widget_open
-> exchanging`` and back to ``idle``, recording how the last attempt ended.
Also owns the confirm-before-disconnect sub-flow for linked accounts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union

from spendwise.core.data_models import Account, DisconnectOptions, DisconnectResponse, ExchangeResponse
from spendwise.core.errors import LinkWidgetError, error_message

from ..state import QueryCache
from ..stores.base import Observable
from ..stores.ui import UIStore
from .accounts import ACCOUNTS_KEY
from .categories import CATEGORIES_KEY
from .plaid import LINK_TOKEN_KEY, PlaidService, link_error_message
from .transactions import TRANSACTIONS_KEY

logger = logging.getLogger("spendwise.frontend.link_flow")

LINK_TOKEN_STALE_TIME = 5 * 60
LINK_TOKEN_RETRIES = 2

SuccessCallback = Callable[[str, Optional[Dict[str, Any]]], Awaitable[Any]]
ExitCallback = Callable[..., Awaitable[Any]]
WidgetError = Union[LinkWidgetError, Dict[str, Any], None]


class LinkState(str, Enum):
    IDLE = "idle"
    TOKEN_REQUESTED = "token_requested"
    WIDGET_OPEN = "widget_open"
    EXCHANGING = "exchanging"


class LinkOutcome(str, Enum):
    LINKED = "linked"
    CANCELLED = "cancelled"
    FAILED = "failed"


class LinkWidget(Protocol):
    """The provider's link widget. It reports back through exactly one of the callbacks."""

    def open(self, token: str, on_success: SuccessCallback, on_exit: ExitCallback) -> None: ...


class CallbackLinkWidget:
    """
    Widget whose UI lives elsewhere (a browser page posting back to the API).

    ``open`` only remembers the token and callbacks; ``succeed``/``exit``
    replay the provider's result into them.
    """

    def __init__(self) -> None:
        self.token: Optional[str] = None
        self._on_success: Optional[SuccessCallback] = None
        self._on_exit: Optional[ExitCallback] = None

    def open(self, token: str, on_success: SuccessCallback, on_exit: ExitCallback) -> None:
        self.token = token
        self._on_success = on_success
        self._on_exit = on_exit

    async def succeed(self, public_token: str, metadata: Optional[Dict[str, Any]] = None) -> Any:
        if self._on_success is None:
            raise RuntimeError("Link widget was never opened.")
        return await self._on_success(public_token, metadata)

    async def exit(self, error: WidgetError = None, metadata: Optional[Dict[str, Any]] = None) -> Any:
        if self._on_exit is None:
            raise RuntimeError("Link widget was never opened.")
        return await self._on_exit(error, metadata)


@dataclass
class PendingDisconnect:
    account: Account
    options: DisconnectOptions = field(default_factory=DisconnectOptions)


def describe_cleanup(response: DisconnectResponse) -> str:
    summary = response.cleanup_summary
    text = (
        f"Removed {summary.transactions_removed} transaction(s) and "
        f"{summary.classifications_removed} classification(s)."
    )
    if summary.account_deactivated:
        text += " The account was deactivated."
    return text


class AccountLinkController(Observable):
    def __init__(
        self,
        plaid: PlaidService,
        cache: QueryCache,
        ui: UIStore,
        widget: Optional[LinkWidget] = None,
    ):
        super().__init__()
        self.plaid = plaid
        self.cache = cache
        self.ui = ui
        self.widget: LinkWidget = widget if widget is not None else CallbackLinkWidget()
        self.state = LinkState.IDLE
        self.last_outcome: Optional[LinkOutcome] = None
        self.pending_disconnect: Optional[PendingDisconnect] = None

    def snapshot(self) -> Dict[str, Any]:
        pending = self.pending_disconnect
        return {
            "state": self.state.value,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "pending_disconnect": (
                {"account": pending.account.model_dump(mode="json"), "options": pending.options.model_dump()}
                if pending
                else None
            ),
        }

    def _set_state(self, state: LinkState) -> None:
        logger.debug("Link flow %s -> %s", self.state.value, state.value)
        self.state = state
        self._emit(self.snapshot())

    def _finish(self, outcome: LinkOutcome) -> None:
        self.last_outcome = outcome
        logger.info("Link flow finished: %s", outcome.value)
        self._set_state(LinkState.IDLE)

    async def start(self) -> LinkState:
        if self.state is not LinkState.IDLE:
            self.ui.notify_warning("Not Ready", "Please wait while we prepare the connection...")
            return self.state

        self._set_state(LinkState.TOKEN_REQUESTED)
        try:
            token = await self.cache.fetch(
                LINK_TOKEN_KEY,
                self.plaid.create_link_token,
                stale_time=LINK_TOKEN_STALE_TIME,
                retry=LINK_TOKEN_RETRIES,
            )
        except Exception as exc:  # noqa: BLE001
            message = error_message(exc, "Unable to prepare the bank connection.")
            logger.error("Could not obtain a link token: %s", message)
            self.ui.notify_error("Connection Unavailable", message)
            self._set_state(LinkState.IDLE)
            return self.state

        self._set_state(LinkState.WIDGET_OPEN)
        self.widget.open(token, self.handle_success, self.handle_exit)
        return self.state

    async def handle_success(
        self, public_token: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[ExchangeResponse]:
        if self.state is not LinkState.WIDGET_OPEN:
            logger.warning("Ignoring link success while %s", self.state.value)
            return None

        self._set_state(LinkState.EXCHANGING)
        try:
            response = await self.plaid.exchange_public_token(public_token)
        except Exception as exc:  # noqa: BLE001
            self.ui.notify_error("Connection Failed", error_message(exc, "Failed to connect bank account."))
            self._finish(LinkOutcome.FAILED)
            return None

        self.cache.invalidate(ACCOUNTS_KEY, TRANSACTIONS_KEY)
        self.ui.notify_success("Bank Connected!", f"Successfully connected {len(response.accounts)} account(s).")
        self._finish(LinkOutcome.LINKED)
        return response

    async def handle_exit(
        self, error: WidgetError = None, metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[LinkOutcome]:
        if self.state is not LinkState.WIDGET_OPEN:
            logger.warning("Ignoring link exit while %s", self.state.value)
            return None

        if isinstance(error, dict):
            error = LinkWidgetError.from_payload(error)
        if error is None:
            self._finish(LinkOutcome.CANCELLED)
            return self.last_outcome

        logger.warning("Link widget exited with %s (%s)", error.error_code, error.error_type)
        self.ui.notify_error("Connection Cancelled", link_error_message(error))
        self._finish(LinkOutcome.FAILED)
        return self.last_outcome

    # Disconnect

    def request_disconnect(self, account: Account) -> PendingDisconnect:
        self.pending_disconnect = PendingDisconnect(account=account)
        self._emit(self.snapshot())
        return self.pending_disconnect

    def cancel_disconnect(self) -> None:
        self.pending_disconnect = None
        self._emit(self.snapshot())

    async def confirm_disconnect(self, options: Optional[DisconnectOptions] = None) -> Optional[DisconnectResponse]:
        pending = self.pending_disconnect
        if pending is None:
            raise RuntimeError("No disconnect is awaiting confirmation.")
        options = options or pending.options
        self.pending_disconnect = None

        try:
            response = await self.plaid.disconnect_account(pending.account.id, options)
        except Exception as exc:  # noqa: BLE001
            self.ui.notify_error("Disconnect Failed", error_message(exc, "Failed to disconnect account."))
            self._emit(self.snapshot())
            return None

        self.cache.invalidate(ACCOUNTS_KEY, TRANSACTIONS_KEY, CATEGORIES_KEY)
        self.ui.notify_success(
            "Account Disconnected",
            response.message or f"{pending.account.display_name} has been disconnected.",
        )
        self.ui.notify_info("Cleanup Summary", describe_cleanup(response))
        self._emit(self.snapshot())
        return response
