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
    database_url: str = "postgresql+asyncpg://storefront:storefront_dev_password@db:5432/storefront"
    create_tables_on_startup: bool = False

    # Authentication
    storefront_api_key: str = "dev-api-key-change-in-production"

    # Catalog
    default_page_size: int = 12
    max_page_size: int = 100
    max_slug_attempts: int = 100
    write_retry_attempts: int = 3

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
