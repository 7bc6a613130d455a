import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import jwt
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from .data_models import LoginCredentials, LoginResponse, RegisterData, User
from .errors import AuthError, GatewayError, NetworkError, decode_response_error, decode_transport_error
from .storage import AUTH_TOKEN_KEY, ClientStorage, MemoryStorage

logger = logging.getLogger(__name__)
DEFAULT_TIMEOUT = httpx.Timeout(20.0, connect=5.0)
DEFAULT_BASE_URL = "http://localhost:3000/api/v1"

# Queries are retried this many times after the first attempt; mutations never are.
DEFAULT_QUERY_RETRIES = 2


def _is_retryable(exc: BaseException) -> bool:
    """Retry only on transport errors and HTTP 5xx."""
    return isinstance(exc, NetworkError)


def token_expired(token: str, now: Optional[datetime] = None) -> bool:
    """
    Return True when ``token`` is a JWT whose ``exp`` claim has passed.

    The signature is not verified here: the server stays the authority, this
    only avoids a pointless round-trip with a token that is known to be dead.
    Opaque (non-JWT) tokens are never reported as expired; a JWT whose
    ``exp`` claim is not a number is treated as expired.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return False
    exp = payload.get("exp")
    if exp is None:
        return False
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        logger.warning("Token carries a malformed exp claim: %r", exp)
        return True
    now = now or datetime.now(timezone.utc)
    try:
        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        # Out of the platform's range: far past or far future.
        return exp < 0
    return expires_at <= now


class GatewayClient:
    """Async client for the SpendWise REST gateway.

    Attaches the bearer token to every request, retries queries on transient
    failures and decodes every error into the ``GatewayError`` hierarchy.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        storage: Optional[ClientStorage] = None,
        timeout: Optional[httpx.Timeout] = None,
        query_retries: int = DEFAULT_QUERY_RETRIES,
        retry_backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required.")

        self.base_url = base_url.rstrip("/")
        self.storage: ClientStorage = storage if storage is not None else MemoryStorage()
        self.query_retries = max(query_retries, 0)
        self.retry_backoff = retry_backoff
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or DEFAULT_TIMEOUT,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )
        self._token: Optional[str] = self.storage.get_item(AUTH_TOKEN_KEY)
        self._unauthorized_handlers: List[Callable[[], None]] = []

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Dispose the underlying HTTP client."""
        await self._client.aclose()

    # Credential token

    @property
    def token(self) -> Optional[str]:
        return self._token

    def is_authenticated(self) -> bool:
        return bool(self._token)

    def set_token(self, token: str) -> None:
        self._token = token
        self.storage.set_item(AUTH_TOKEN_KEY, token)

    def clear_token(self) -> None:
        self._token = None
        self.storage.remove_item(AUTH_TOKEN_KEY)

    def add_unauthorized_handler(self, handler: Callable[[], None]) -> None:
        """Register a callback fired after any request is answered with 401."""
        self._unauthorized_handlers.append(handler)

    def _handle_unauthorized(self) -> None:
        logger.warning("Gateway answered 401; clearing credential token.")
        self.clear_token()
        for handler in list(self._unauthorized_handlers):
            try:
                handler()
            except Exception:  # noqa: BLE001
                logger.exception("Unauthorized handler %r failed", handler)

    # Transport

    def _headers(self) -> Dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, url, params=params, json=json, headers=self._headers())
        except httpx.RequestError as exc:
            logger.error("Network error on %s %s: %s", method, url, exc)
            raise decode_transport_error(exc) from exc

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            try:
                return response.json()
            except ValueError as exc:
                raise NetworkError("The server returned an unreadable response.", status_code=response.status_code) from exc

        error = decode_response_error(response)
        if isinstance(error, AuthError):
            self._handle_unauthorized()
        logger.error("%s %s failed with %s: %s", method, url, response.status_code, error.message)
        raise error

    async def query(self, url: str, params: Optional[Dict[str, Any]] = None, retries: Optional[int] = None) -> Any:
        """GET with automatic retries on transient failures."""
        attempts = (self.query_retries if retries is None else max(retries, 0)) + 1
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self.retry_backoff, max=5),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("Retrying GET %s (attempt %d)", url, attempt.retry_state.attempt_number)
                return await self._send("GET", url, params=params)

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.query(url, params=params)

    async def post(self, url: str, data: Any = None) -> Any:
        return await self._send("POST", url, json=data)

    async def put(self, url: str, data: Any = None) -> Any:
        return await self._send("PUT", url, json=data)

    async def delete(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._send("DELETE", url, params=params)

    # Authentication

    async def login(self, credentials: LoginCredentials) -> LoginResponse:
        """Exchange credentials for a token. The caller decides whether to keep it."""
        payload = await self.post("/auth/login", credentials.model_dump())
        return LoginResponse.model_validate(payload)

    async def register(self, user_data: RegisterData) -> LoginResponse:
        payload = await self.post("/auth/register", {"user": user_data.model_dump()})
        return LoginResponse.model_validate(payload)

    async def end_session(self) -> None:
        """Invalidate the server-side session. The local token is left to the caller."""
        await self.delete("/auth/sessions")

    async def get_current_user(self) -> User:
        payload = await self.get("/auth/me")
        return User.model_validate(payload.get("user", payload))


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_QUERY_RETRIES",
    "GatewayClient",
    "GatewayError",
    "token_expired",
]
