"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Partner clients run in mock mode when their API key is empty

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Rate limiter knobs live here so ops can tune them without a deploy
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://finnza:finnza@db:5432/finnza"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Asaas (payments / subscriptions)
    asaas_api_key: str = ""
    asaas_base_url: str = "https://sandbox.asaas.com/api/v3"
    asaas_mock_enabled: bool = False
    asaas_webhook_token: str = ""
    asaas_timeout_seconds: int = 30

    # BomControle (ERP)
    bomcontrole_api_key: str = ""
    bomcontrole_base_url: str = "https://apinewintegracao.bomcontrole.com.br"
    bomcontrole_timeout_seconds: int = 30

    # Clint (CRM)
    clint_webhook_url: str = ""
    clint_timeout_seconds: int = 15

    # Auth
    jwt_secret: str = "development-secret-change-me"
    jwt_expiration_hours: int = 24
    password_reset_ttl_minutes: int = 60

    # Rate limiter (BomControle)
    rate_limiter_max_concurrent: int = 3
    rate_limiter_cache_ttl_seconds: int = 300
    rate_limiter_cooldown_seconds: int = 60
    rate_limiter_max_retries: int = 3
    rate_limiter_initial_delay_seconds: float = 1.0
    rate_limiter_acquire_timeout_seconds: float = 5.0
    rate_limiter_cleanup_minutes: int = 10
    scheduler_enabled: bool = True

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
