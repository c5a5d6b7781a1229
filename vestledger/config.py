"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "VestLedger API"
    app_version: str = "0.1.0"
    debug: bool = True
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"

    # Accounts
    owner_address: str = "owner"
    wallet_address: str = "vesting-wallet"
    escrow_address: str = "vesting-escrow"

    # Multi-schedule ledger
    token_asset: str = "VEST"
    vesting_duration_seconds: int = 365 * 86400  # engine-wide ramp length

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_prefix = "VESTLEDGER_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
