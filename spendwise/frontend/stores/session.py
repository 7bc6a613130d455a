from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

from spendwise.core.data_models import LoginCredentials, RegisterData, User
from spendwise.core.errors import error_message
from spendwise.core.gateway import GatewayClient, token_expired

from .base import Observable

logger = logging.getLogger("spendwise.frontend.session")


class SessionStatus(str, Enum):
    ANONYMOUS = "anonymous"
    CHECKING = "checking"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionState:
    user: Optional[User] = None
    status: SessionStatus = SessionStatus.ANONYMOUS
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status in (SessionStatus.CHECKING, SessionStatus.AUTHENTICATING)


class SessionStore(Observable):
    """
    The authenticated-user state of one running client.

    Each transition takes a new generation number; responses that come back
    for an older generation are discarded, so the most recent explicit user
    action wins (a login that resolves after a logout does not log back in).
    """

    def __init__(self, client: GatewayClient):
        super().__init__()
        self.client = client
        self.state = SessionState()
        self._generation = 0
        client.add_unauthorized_handler(self._on_unauthorized)

    @property
    def generation(self) -> int:
        return self._generation

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _commit(self, generation: int, **changes: Any) -> bool:
        if generation != self._generation:
            logger.warning(
                "Discarding stale session update (generation %d, current %d)",
                generation,
                self._generation,
            )
            return False
        self.state = replace(self.state, **changes)
        self._emit(self.state)
        return True

    async def login(self, credentials: LoginCredentials) -> SessionState:
        return await self._authenticate(credentials, register=False)

    async def register(self, user_data: RegisterData) -> SessionState:
        return await self._authenticate(user_data, register=True)

    async def _authenticate(self, payload: Any, register: bool) -> SessionState:
        generation = self._next_generation()
        self._commit(generation, status=SessionStatus.AUTHENTICATING, error=None)
        try:
            if register:
                response = await self.client.register(payload)
            else:
                response = await self.client.login(payload)
        except Exception as exc:
            fallback = "Registration failed" if register else "Login failed"
            self._commit(generation, user=None, status=SessionStatus.ANONYMOUS, error=error_message(exc, fallback))
            logger.info("%s: %s", fallback, error_message(exc, fallback))
            raise

        if generation != self._generation:
            logger.warning("Ignoring %s response superseded by a newer action", "register" if register else "login")
            return self.state

        self.client.set_token(response.token)
        self._commit(generation, user=response.user, status=SessionStatus.AUTHENTICATED, error=None)
        logger.info("User %s signed in", response.user.id)
        return self.state

    async def logout(self) -> SessionState:
        """Clear the local session; the server-side invalidation is best effort."""
        generation = self._next_generation()
        self._commit(generation, user=None, status=SessionStatus.ANONYMOUS, error=None)
        try:
            await self.client.end_session()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Server-side logout failed, local session cleared anyway: %s", error_message(exc))
        finally:
            if generation == self._generation:
                self.client.clear_token()
        return self.state

    async def check_auth_status(self) -> SessionState:
        """Validate a persisted token. Failure silently leaves the session anonymous."""
        generation = self._next_generation()
        token = self.client.token
        if not token:
            self._commit(generation, user=None, status=SessionStatus.ANONYMOUS)
            return self.state
        if token_expired(token):
            logger.info("Persisted token has expired; starting anonymous")
            self.client.clear_token()
            self._commit(generation, user=None, status=SessionStatus.ANONYMOUS)
            return self.state

        self._commit(generation, status=SessionStatus.CHECKING)
        try:
            user = await self.client.get_current_user()
        except Exception as exc:  # noqa: BLE001
            logger.info("Persisted token was not accepted: %s", error_message(exc))
            self._commit(generation, user=None, status=SessionStatus.ANONYMOUS, error=None)
            return self.state

        self._commit(generation, user=user, status=SessionStatus.AUTHENTICATED, error=None)
        return self.state

    async def initialize_auth(self) -> SessionState:
        return await self.check_auth_status()

    def clear_error(self) -> None:
        self.state = replace(self.state, error=None)
        self._emit(self.state)

    def set_user(self, user: Optional[User]) -> None:
        generation = self._next_generation()
        status = SessionStatus.AUTHENTICATED if user else SessionStatus.ANONYMOUS
        self._commit(generation, user=user, status=status)

    def _on_unauthorized(self) -> None:
        # A rejected login is reported by the login flow itself.
        if self.state.status is SessionStatus.AUTHENTICATING:
            return
        generation = self._next_generation()
        self._commit(generation, user=None, status=SessionStatus.ANONYMOUS)
        logger.info("Session ended by the server")
