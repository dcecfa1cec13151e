"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finance.db"

    # Service
    service_name: str = "finance-gateway"
    log_level: str = "INFO"

    # Billing
    removed_card_label: str = "Removed card"  # Shown on invoices of deleted cards
    max_installments: int = 24


settings = Settings()
