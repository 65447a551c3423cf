from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_PAGE_SIZE = 1000


class Settings(BaseSettings):
    # Database
    database_url: str
    db_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout: float = 30.0

    # Postgres only: per-transaction statement timeout, 0 disables it
    statement_timeout_ms: int = 0

    # Tenancy
    tenant_schema_prefix: str = "tenant_"
    sqlite_tenant_dir: str | None = Field(
        default=None,
        description="Directory holding per-tenant SQLite files (None = beside the main database).",
    )

    # Pagination
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("db_pool_size", "default_page_size", "max_page_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("db_max_overflow", "statement_timeout_ms")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("tenant_schema_prefix")
    @classmethod
    def validate_schema_prefix(cls, v: str) -> str:
        if not v or not v.replace("_", "").isalnum() or not v[0].isalpha():
            raise ValueError("tenant_schema_prefix must be a lower-case identifier prefix")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance so the .env is parsed once.
    """
    return Settings()
