"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Storage backend for the catalog ("sql" or "memory")
    catalog_backend: str = "sql"

    # Authentication (service key shared with the auth gateway)
    catalog_api_key: str = "dev-api-key-change-in-production"

    # Header carrying the resolved tenant (organization) id
    tenant_header: str = "X-Organization-ID"

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
