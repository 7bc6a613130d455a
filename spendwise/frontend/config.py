from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Runtime settings shared across the client application."""

    def __init__(self) -> None:
        self.title: str = "SpendWise"
        self.version: str = "1.0.0"
        self.api_url: str = os.getenv("SPENDWISE_API_URL", "http://localhost:3000/api/v1")
        self.request_timeout: float = float(os.getenv("SPENDWISE_REQUEST_TIMEOUT", "20"))
        self.query_retries: int = int(os.getenv("SPENDWISE_QUERY_RETRIES", "2"))
        self.retry_backoff: float = float(os.getenv("SPENDWISE_RETRY_BACKOFF", "1"))
        # Query cache: entries go stale after this many seconds.
        self.query_stale_time: int = int(os.getenv("SPENDWISE_QUERY_STALE_TIME", "300"))
        self.query_cache_size: int = int(os.getenv("SPENDWISE_QUERY_CACHE_SIZE", "100"))
        self.notification_duration_ms: int = int(os.getenv("SPENDWISE_NOTIFICATION_DURATION_MS", "5000"))
        self.storage_path: Optional[str] = os.getenv("SPENDWISE_STORAGE_PATH") or None
        self.system_theme: Optional[str] = os.getenv("SPENDWISE_SYSTEM_THEME") or None
        self.plaid_env: str = os.getenv("PLAID_ENV", "sandbox")
        self.log_level: str = os.getenv("SPENDWISE_LOG_LEVEL", "INFO").upper()
        self.debug: bool = _env_bool("SPENDWISE_DEBUG", False)
        self.cors_origins: List[str] = [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]


settings = Settings()
