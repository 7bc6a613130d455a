from __future__ import annotations

import logging
import secrets
from typing import Callable, List, Literal, Optional

from spendwise.core.data_models import Notification, NotificationType
from spendwise.core.storage import THEME_KEY, ClientStorage, MemoryStorage
from spendwise.core.timers import Scheduler, TimerRegistry

from ..config import settings
from .base import Observable

logger = logging.getLogger("spendwise.frontend.ui")

Theme = Literal["light", "dark"]
THEMES = ("light", "dark")
DEFAULT_THEME: Theme = "light"

ThemeApplier = Callable[[str], None]


class UIStore(Observable):
    """
    Ephemeral UI signals: sidebar flag, colour theme and the notification queue.

    The theme is restored from storage, then from the OS preference, then
    falls back to light; every change is written back to storage and pushed
    to the registered theme appliers. Notifications are shown in insertion
    order and expire on timers owned by this container.
    """

    def __init__(
        self,
        storage: Optional[ClientStorage] = None,
        scheduler: Optional[Scheduler] = None,
        system_theme: Optional[Callable[[], Optional[str]]] = None,
        default_duration_ms: Optional[int] = None,
    ):
        super().__init__()
        self.storage: ClientStorage = storage if storage is not None else MemoryStorage()
        self.default_duration_ms = (
            settings.notification_duration_ms if default_duration_ms is None else default_duration_ms
        )
        self._system_theme = system_theme or (lambda: settings.system_theme)
        self._timers = TimerRegistry(scheduler)
        self._theme_appliers: List[ThemeApplier] = []

        self.sidebar_open: bool = False
        self.theme: Theme = self._restore_theme()
        self.notifications: List[Notification] = []

    # Sidebar

    def set_sidebar_open(self, is_open: bool) -> None:
        self.sidebar_open = bool(is_open)
        self._emit(self)

    def toggle_sidebar(self) -> None:
        self.set_sidebar_open(not self.sidebar_open)

    # Theme

    def _restore_theme(self) -> Theme:
        stored = self.storage.get_item(THEME_KEY)
        if stored in THEMES:
            return stored  # type: ignore[return-value]
        preferred = self._system_theme()
        if preferred in THEMES:
            return preferred  # type: ignore[return-value]
        return DEFAULT_THEME

    def add_theme_applier(self, applier: ThemeApplier) -> None:
        """Register a presentation hook; it is applied to the current theme right away."""
        self._theme_appliers.append(applier)
        applier(self.theme)

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}'; expected one of {THEMES}.")
        self.theme = theme  # type: ignore[assignment]
        self.storage.set_item(THEME_KEY, theme)
        for applier in list(self._theme_appliers):
            applier(theme)
        logger.info("Theme switched to %s", theme)
        self._emit(self)

    def toggle_theme(self) -> None:
        self.set_theme("dark" if self.theme == "light" else "light")

    # Notifications

    def _new_id(self) -> str:
        while True:
            candidate = secrets.token_hex(4)
            if all(item.id != candidate for item in self.notifications):
                return candidate

    def add_notification(
        self,
        type: NotificationType,
        title: str,
        message: str = "",
        duration: Optional[int] = None,
    ) -> Notification:
        """Queue a notification; it expires after ``duration`` ms unless that is 0 or negative."""
        notification = Notification(
            id=self._new_id(),
            type=type,
            title=title,
            message=message,
            duration=self.default_duration_ms if duration is None else duration,
        )
        # Expiry is scheduled before the notification joins the queue.
        if notification.duration > 0:
            self._timers.schedule(
                notification.id,
                notification.duration,
                lambda: self.remove_notification(notification.id),
            )
        self.notifications = [*self.notifications, notification]
        logger.debug("Notification %s queued (%s: %s)", notification.id, type, title)
        self._emit(self)
        return notification

    def notify_success(self, title: str, message: str = "", duration: Optional[int] = None) -> Notification:
        return self.add_notification("success", title, message, duration)

    def notify_error(self, title: str, message: str = "", duration: Optional[int] = None) -> Notification:
        return self.add_notification("error", title, message, duration)

    def notify_warning(self, title: str, message: str = "", duration: Optional[int] = None) -> Notification:
        return self.add_notification("warning", title, message, duration)

    def notify_info(self, title: str, message: str = "", duration: Optional[int] = None) -> Notification:
        return self.add_notification("info", title, message, duration)

    def remove_notification(self, notification_id: str) -> bool:
        """Remove by id. Removing an id that is already gone is a no-op."""
        self._timers.cancel(notification_id)
        remaining = [item for item in self.notifications if item.id != notification_id]
        if len(remaining) == len(self.notifications):
            return False
        self.notifications = remaining
        self._emit(self)
        return True

    def clear_notifications(self) -> None:
        self._timers.cancel_all()
        self.notifications = []
        self._emit(self)

    def pending_timers(self) -> int:
        return len(self._timers)
