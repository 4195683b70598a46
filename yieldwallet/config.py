"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. The .env file is gitignored; .env.example lists every setting.

Pydantic Settings resolves each value from:
  1. Environment variables (highest priority)
  2. The .env file
  3. Defaults defined here (lowest priority)

Usage:
    from yieldwallet.config import settings
    print(settings.CHECKIN_BONUS_CENTS)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Yield Wallet service.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Verifies the bearer tokens issued by the identity service
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Yield Wallet API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for development; swap to a PostgreSQL (asyncpg) URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/wallet.db"

    # --- Identity ---
    # REQUIRED: shared with the identity service that issues the tokens
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # --- Ledger ---
    # ISO 4217 code; every amount in the system is in minor units of it
    CURRENCY: str = "NGN"
    # Daily check-in bonus in minor units (5000 = 50.00)
    CHECKIN_BONUS_CENTS: int = 5000

    # --- Accrual batch ---
    # The in-process scheduler is off by default so that multi-worker
    # deployments can run the batch from system cron instead
    ACCRUAL_SCHEDULER_ENABLED: bool = False
    ACCRUAL_CRON_HOUR: int = 0
    ACCRUAL_CRON_MINUTE: int = 5


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
