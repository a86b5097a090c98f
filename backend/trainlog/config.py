"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./trainlog.db"

    # Branding embedded in exported reports
    APP_NAME: str = "ArmWrestling Pro"
    REPORT_TITLE: str = "Progress Report"
    CARD_TITLE: str = "My Arm Wrestling Progress"
    CARD_TAGLINE: str = "Track your journey"

    # Reporting windows
    REPORT_WINDOW_MONTHS: int = 3
    CONSISTENCY_WINDOW_DAYS: int = 30

    # Units used when a record or user carries no preference
    DEFAULT_WEIGHT_UNIT: str = "lbs"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Frontend URL for CORS
    FRONTEND_URL: str = "http://localhost:8081"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Create a global settings instance for direct import
settings = get_settings()
