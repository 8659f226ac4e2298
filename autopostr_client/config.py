"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - The backend key comes from environment variables (placeholder default only)
    - get_settings() is cached (lru_cache) — single instance per process
    - Every duration is in milliseconds (suffix _ms) unless suffixed _seconds

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults mirror the browser client: 3 attempts, 1s base delay, 24h session,
      5 min refresh, 1 min expiry check
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autopostr_client.core.retry_policy import RetryPolicy


class Settings(BaseSettings):
    """Client settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Backend endpoint
    backend_url: str = "https://script.google.com/macros/s/placeholder/exec"
    backend_api_key: str = "placeholder-key"
    envelope_operation_field: str = "operation"
    request_timeout_seconds: float = 30.0

    # Retry
    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 1000
    retry_max_delay_ms: int = 60_000
    retry_logical_failures: bool = True

    # Cache
    default_cache_ttl_ms: int = 30_000
    profile_cache_ttl_ms: int = 60_000

    # Session
    session_timeout_ms: int = 24 * 60 * 60 * 1000
    session_refresh_interval_ms: int = 5 * 60 * 1000
    session_expiry_check_interval_ms: int = 60 * 1000

    # Key-value store
    database_url: str = "sqlite+aiosqlite:///./autopostr_client.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted databases provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Bridge API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            base_delay_ms=self.retry_base_delay_ms,
            max_delay_ms=self.retry_max_delay_ms,
            retry_logical_failures=self.retry_logical_failures,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
