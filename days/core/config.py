"""
Configuration helpers for the Day Tracker core.

Settings are read once from environment variables (storage backend, data
file, database URL, remote API) so repositories/services never touch
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[1] / "data.json"
STORAGE_BACKENDS = {"json", "sql", "memory"}


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_file: Path
    database_url: str
    prefs_namespace: str
    session_namespace: str
    remote_enabled: bool
    api_base_url: str
    api_timeout_seconds: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    backend = (os.getenv("DAYS_STORAGE_BACKEND") or "json").strip().lower()
    if backend not in STORAGE_BACKENDS:
        backend = "json"
    base_url = os.getenv("DAYS_API_BASE_URL", "http://localhost:8080/").strip()
    if not base_url.endswith("/"):
        base_url += "/"

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=backend,
        data_file=Path(os.getenv("DAYS_DATA_FILE") or DEFAULT_DATA_FILE),
        database_url=os.getenv("DATABASE_URL", ""),
        prefs_namespace=os.getenv("DAYS_PREFS_NAMESPACE", "day_tracker_prefs"),
        session_namespace=os.getenv("DAYS_SESSION_NAMESPACE", "user_session"),
        remote_enabled=_bool(os.getenv("DAYS_REMOTE_ENABLED"), False),
        api_base_url=base_url,
        api_timeout_seconds=max(1, _int(os.getenv("DAYS_API_TIMEOUT", "30"), 30)),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
