from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from spendwise.core.data_models import DisconnectOptions, Notification, User

from .stores.session import SessionState
from .stores.ui import UIStore


# Session schemas
class SessionResponse(BaseModel):
    user: Optional[User] = None
    status: str
    is_authenticated: bool
    is_loading: bool
    error: Optional[str] = None

    @classmethod
    def from_state(cls, state: SessionState) -> "SessionResponse":
        return cls(
            user=state.user,
            status=state.status.value,
            is_authenticated=state.is_authenticated,
            is_loading=state.is_loading,
            error=state.error,
        )


# UI schemas
class ThemeRequest(BaseModel):
    theme: Literal["light", "dark"]


class SidebarRequest(BaseModel):
    open: bool


class UIResponse(BaseModel):
    theme: str
    sidebar_open: bool
    notifications: List[Notification]

    @classmethod
    def from_store(cls, store: UIStore) -> "UIResponse":
        return cls(theme=store.theme, sidebar_open=store.sidebar_open, notifications=store.notifications)


class RemovedResponse(BaseModel):
    removed: bool


# Link schemas
class LinkSuccessRequest(BaseModel):
    public_token: str
    metadata: Optional[Dict[str, Any]] = None


class LinkExitRequest(BaseModel):
    error: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class DisconnectConfirmRequest(BaseModel):
    options: Optional[DisconnectOptions] = None


# Mutation schemas
class CategorizeRequest(BaseModel):
    category_id: int
    confidence_score: float = 1.0


class MutationResponse(BaseModel):
    """Outcome of a mutation; failures are reported through the notification queue."""

    success: bool
    result: Optional[Any] = None
