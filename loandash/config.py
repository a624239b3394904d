"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    data_file_path: str = "./data/db.json"

    # Document defaults
    default_currency: str = "MAD"
    auto_archive_default: str = "never"

    # Service
    service_name: str = "loandash"
    app_version: str = "1.2.0"
    log_level: str = "INFO"

    # Release check
    releases_api_url: str = "https://api.github.com/repos/hamzamix/LoanDash/releases/latest"
    releases_page_url: str = "https://github.com/hamzamix/LoanDash/releases"
    http_timeout_seconds: float = 5.0


settings = Settings()
