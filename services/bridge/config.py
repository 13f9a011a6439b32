"""
Bridge-Y Configuration
Single source of truth for environment-driven settings
"""
import os
from dataclasses import dataclass
from typing import Optional

SERVICE_NAME = "bridge-y"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8091

# =========================
# Feed paging
# =========================

FEED_DEFAULT_LIMIT = 50
FEED_MAX_LIMIT = 500


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def normalize_database_url(url: Optional[str]) -> Optional[str]:
    """
    Force the asyncpg driver on plain PostgreSQL URLs.

    postgres://u:p@h/db   -> postgresql+asyncpg://u:p@h/db
    postgresql://u:p@h/db -> postgresql+asyncpg://u:p@h/db
    """
    if not url:
        return None
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    environment: str = "development"
    database_ssl: bool = False
    database_ssl_verify: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    command_timeout: Optional[int] = None
    create_schema: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        environment = os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development"
        is_production = environment == "production"
        is_development = environment == "development"

        return cls(
            database_url=normalize_database_url(os.getenv("DATABASE_URL")),
            environment=environment,
            database_ssl=_env_bool("DATABASE_SSL", is_production),
            database_ssl_verify=_env_bool("DATABASE_SSL_VERIFY", False),
            pool_size=_env_int("DB_POOL_SIZE", 10),
            max_overflow=_env_int("DB_MAX_OVERFLOW", 20),
            pool_timeout=_env_int("DB_POOL_TIMEOUT", 30),
            command_timeout=_env_int("DB_COMMAND_TIMEOUT", None),
            create_schema=_env_bool("DB_CREATE_SCHEMA", False),
            host=os.getenv("HOST") or DEFAULT_HOST,
            port=_env_int("PORT", DEFAULT_PORT),
            log_level=os.getenv("LOG_LEVEL") or ("DEBUG" if is_development else "INFO"),
            log_json=_env_bool("LOG_JSON", not is_development),
        )
