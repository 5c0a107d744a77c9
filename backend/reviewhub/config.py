"""Application configuration via Pydantic Settings."""

from typing import List
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Target application
    APP_NAME: str = "Koton"
    ANDROID_PACKAGE_ID: str = "com.koton.app"
    IOS_APP_ID: str = "1436987707"
    LANGUAGE: str = "tr"
    COUNTRY: str = "TR"

    # Review limits
    MAX_REVIEWS: int = 100  # Default per request when no limit is given
    MAX_LIMIT: int = 500  # Upper bound accepted from the limit query param
    STATS_SAMPLE_SIZE: int = 50
    RECENT_REVIEWS_COUNT: int = 5

    # Scraping
    HTTP_TIMEOUT: float = 10.0
    USE_SCRAPER_LIBRARY: bool = True  # Google Play tier 1 (google-play-scraper)

    # CORS
    CORS_ORIGINS: str = "*"  # Comma-separated list of allowed origins

    @model_validator(mode="after")
    def normalize_locale(self) -> "Settings":
        """Store language lowercase and country uppercase, as the storefronts expect."""
        self.LANGUAGE = self.LANGUAGE.strip().lower()
        self.COUNTRY = self.COUNTRY.strip().upper()
        if self.MAX_REVIEWS > self.MAX_LIMIT:
            self.MAX_REVIEWS = self.MAX_LIMIT
        return self

    @property
    def play_store_url(self) -> str:
        return f"https://play.google.com/store/apps/details?id={self.ANDROID_PACKAGE_ID}"

    @property
    def app_store_url(self) -> str:
        return f"https://apps.apple.com/app/id{self.IOS_APP_ID}"

    def get_cors_origins(self) -> List[str]:
        """Parse CORS_ORIGINS into a list of origins.

        Returns:
            List of origin strings, ["*"] if CORS_ORIGINS is empty
        """
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]


settings = Settings()
