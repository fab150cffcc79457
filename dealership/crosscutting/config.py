"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the business rules of the back-office

Collaborators:
  - container.py: picks in-memory vs PostgreSQL stores, favorite slot cap
  - crosscutting/logger.py: log level and JSON toggle
  - infrastructure/db/pool.py: pool sizing and statement timeout

Constraints:
  - Lives in crosscutting, NOT in domain/application
  - No business logic — pure configuration

Notes:
  - Singleton via lru_cache
  - Empty DATABASE_URL means "in-memory stores" (tests / local dev)
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string (empty => in-memory stores)
        app_env: Application environment (development/test/production)
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        db_pool_min_size: Minimum pool connections (default: 2)
        db_pool_max_size: Maximum pool connections (default: 10)
        db_statement_timeout_ms: Per-statement timeout (default: 30s)
        max_favorite_slots: Global cap of favorite vehicles (default: 6)
        default_page_size: Page size when the caller omits it (default: 15)
        max_page_size: Upper bound for page size (default: 100)
    """

    database_url: str = ""

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Business rules
    max_favorite_slots: int = 6

    # Pagination
    default_page_size: int = 15
    max_page_size: int = 100

    @field_validator("max_favorite_slots")
    @classmethod
    def max_favorite_slots_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_favorite_slots must be >= 1")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_upper(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @model_validator(mode="after")
    def validate_pagination(self):
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be >= 1")
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) must be <= "
                f"max_page_size ({self.max_page_size})"
            )
        return self

    @model_validator(mode="after")
    def validate_pool(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError("db_pool_min_size must be <= db_pool_max_size")
        return self

    @model_validator(mode="after")
    def validate_production_requirements(self):
        if self.is_production() and not self.database_url.strip():
            raise ValueError("DATABASE_URL is required in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def uses_database(self) -> bool:
        return bool(self.database_url.strip())

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
