"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./debt_ledger.db"
    sqlite_busy_timeout_seconds: float = 5.0
    lock_nowait: bool = True  # SELECT ... FOR UPDATE NOWAIT on debt rows

    # Service
    service_name: str = "debt-ledger"
    log_level: str = "INFO"

    # Photo storage
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"

    # Listings
    debts_page_size: int = 20
    clients_page_size: int = 200
    max_page_size: int = 500
    client_debts_limit: int = 500
    client_search_limit: int = 50


settings = Settings()
