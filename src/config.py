import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_PAGE_LIMIT = 10
SUPPORTED_LANGS = ("EN", "TR")


def _env_int(name, default):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name, default=None):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class AppConfig:
    """Runtime settings, read once per process from USERS_* environment variables."""

    api_base_url: str = DEFAULT_API_BASE_URL
    page_limit: int = DEFAULT_PAGE_LIMIT
    api_timeout: Optional[float] = None
    lang: str = "EN"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        base_url = os.environ.get("USERS_API_BASE_URL", "").strip() or DEFAULT_API_BASE_URL
        lang = os.environ.get("USERS_APP_LANG", "EN").strip().upper()
        if lang not in SUPPORTED_LANGS:
            lang = "EN"
        return cls(
            api_base_url=base_url.rstrip("/"),
            page_limit=_env_int("USERS_PAGE_LIMIT", DEFAULT_PAGE_LIMIT),
            api_timeout=_env_float("USERS_API_TIMEOUT"),
            lang=lang,
            log_level=os.environ.get("USERS_APP_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
