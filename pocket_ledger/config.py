"""Configuration management using Pydantic Settings"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./pocket_ledger.db"

    # Service
    service_name: str = "pocket-ledger"
    log_level: str = "INFO"

    # Amount formatting (id-ID style: "Rp 1.500.000")
    currency_symbol: str = "Rp"
    thousands_separator: str = "."

    # Loans
    due_soon_window_days: int = 30
    reminder_days: List[int] = [7, 3, 1, 0]
    default_payment_method: str = "cash"

    # Listing
    default_page_size: int = 10


settings = Settings()
