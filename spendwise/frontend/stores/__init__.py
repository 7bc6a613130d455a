from .base import Observable
from .session import SessionState, SessionStatus, SessionStore
from .ui import UIStore

__all__ = ["Observable", "SessionState", "SessionStatus", "SessionStore", "UIStore"]
