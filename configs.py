"""Application settings loaded from environment variables.

Defines all environment-driven configuration used by the app.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration model for the application."""

    # API parameters
    HOST: str = "0.0.0.0"
    PORT: int = 5001
    ALLOWED_ORIGINS: list[str] = ["*"]

    # Browser automation
    CHROMIUM_EXECUTABLE: Optional[str] = None
    CHROME_EXECUTABLE_PATH: Optional[str] = None
    BROWSER_HEADLESS: bool = True

    # Price search
    CACHE_TTL_SECONDS: int = 60 * 60
    FETCH_TIMEOUT_SECONDS: float = 120.0
    CONCURRENT_STORES: bool = True

    # Redis result cache (in-process cache when REDIS_HOST is unset)
    REDIS_HOST: Optional[str] = None
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SSL: bool = False

    # Search history persistence
    SEARCH_HISTORY_ENABLED: bool = False
    DATABASE_URL: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
