"""Gateway failure taxonomy.

Every failure crossing the gateway boundary is decoded into exactly one of
the classes below so that callers never inspect raw transport errors or
ad hoc response bodies.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

DEFAULT_ERROR_MESSAGE = "An error occurred"
NETWORK_ERROR_MESSAGE = "Unable to reach the server. Please check your connection."
UNEXPECTED_LINK_ERROR_MESSAGE = "An unexpected error occurred."


class GatewayError(Exception):
    """Base class for all decoded gateway failures."""

    kind = "gateway"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[List[str]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = list(details or [])
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "status_code": self.status_code,
        }


class NetworkError(GatewayError):
    """Transport failure, timeout, or a 5xx response."""

    kind = "network"

    @property
    def is_transient(self) -> bool:
        return True


class AuthError(GatewayError):
    """The server rejected the credential token (HTTP 401)."""

    kind = "auth"


class ApiValidationError(GatewayError):
    """A 4xx response, usually carrying a structured error body."""

    kind = "validation"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[List[str]] = None,
        status_code: Optional[int] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message, code=code, details=details, status_code=status_code)
        self.field = field


class LinkWidgetError(GatewayError):
    """An error reported by the bank-link widget on exit."""

    kind = "link_widget"

    def __init__(
        self,
        message: str,
        error_type: Optional[str] = None,
        error_code: Optional[str] = None,
        display_message: Optional[str] = None,
    ):
        super().__init__(message, code=error_code)
        self.error_type = error_type
        self.error_code = error_code
        self.display_message = display_message

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LinkWidgetError":
        error_code = payload.get("error_code")
        display_message = payload.get("display_message")
        message = display_message or payload.get("error_message") or error_code or UNEXPECTED_LINK_ERROR_MESSAGE
        return cls(
            message,
            error_type=payload.get("error_type"),
            error_code=error_code,
            display_message=display_message,
        )


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _extract_message(body: Any) -> Optional[str]:
    if isinstance(body, str):
        return body.strip() or None
    if not isinstance(body, dict):
        return None
    for field in ("error", "message", "detail"):
        value = body.get(field)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict):
            nested = _extract_message(value)
            if nested:
                return nested
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        return str(errors[0])
    if isinstance(errors, dict) and errors:
        field, messages = next(iter(errors.items()))
        first = messages[0] if isinstance(messages, list) and messages else messages
        return f"{field} {first}"
    return None


def _extract_details(body: Any) -> List[str]:
    if not isinstance(body, dict):
        return []
    details = body.get("details")
    if isinstance(details, list):
        return [str(item) for item in details]
    errors = body.get("errors")
    if isinstance(errors, list):
        return [str(item) for item in errors]
    if isinstance(errors, dict):
        flattened: List[str] = []
        for field, messages in errors.items():
            for message in messages if isinstance(messages, list) else [messages]:
                flattened.append(f"{field} {message}")
        return flattened
    return []


def decode_response_error(response: httpx.Response) -> GatewayError:
    """Translate a non-2xx response into the matching gateway error."""
    body = _safe_json(response)
    if body is None:
        body = response.text
    message = _extract_message(body) or response.reason_phrase or DEFAULT_ERROR_MESSAGE
    code = body.get("code") if isinstance(body, dict) else None
    details = _extract_details(body)
    status_code = response.status_code

    if status_code == 401:
        return AuthError(message, code=code, details=details, status_code=status_code)
    if status_code >= 500:
        return NetworkError(message, code=code, details=details, status_code=status_code)
    field = body.get("field") if isinstance(body, dict) else None
    return ApiValidationError(message, code=code, details=details, status_code=status_code, field=field)


def decode_transport_error(exc: httpx.RequestError) -> NetworkError:
    """Wrap an httpx transport failure (timeout, refused connection, ...)."""
    if isinstance(exc, httpx.TimeoutException):
        return NetworkError("The request timed out. Please try again.", code="timeout")
    return NetworkError(str(exc) or NETWORK_ERROR_MESSAGE, code="network")


def error_message(exc: BaseException, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """Single human-readable string for any exception surfaced to the UI."""
    if isinstance(exc, GatewayError):
        return exc.message or fallback
    return str(exc) or fallback
