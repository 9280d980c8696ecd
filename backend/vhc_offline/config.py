from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "VHC Offline Sync"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Local cache store (one SQLite file per workstation)
    cache_database_url: str = "sqlite:///data/vhc_cache.db"
    cache_store_name: str = "WrenchdIVHC"
    cache_schema_version: int = 1

    # Upstream VHC server
    api_base_url: str = "http://localhost:5000"
    api_timeout_seconds: float | None = None

    # Connectivity & replay of queued writes
    connectivity_probe_path: str = "/api/ping"
    connectivity_probe_interval: float = 15.0
    sync_on_reconnect: bool = True
    sync_max_attempts: int = 5

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine SQL statements
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_cache: str = "INFO"            # Cache store + request layer
    log_level_sync: str = "INFO"             # Replay of pending operations

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "env_prefix": "VHC_",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance: reads .env once."""
    return Settings()
