"""
Environment configuration for the hotel booking API.
Values come from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Hotel Booking API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    # JSON list, e.g. CORS_ORIGINS='["https://hotel.example.com"]'
    CORS_ORIGINS: List[str] = Field(default=["*"])

    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Seeded administrator
    ADMIN_EMAIL: str = "admin@hotel.example.com"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_DISPLAY_NAME: str = "Hotel Admin"

    # Login throttling
    MAX_FAILED_LOGIN_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    # Business rules
    MAX_ROOM_IMAGES: int = 4
    ENFORCE_STATUS_TRANSITIONS: bool = True
    CURRENCY: str = "GHS"

    # Media
    MEDIA_BASE_URL: str = "/media"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
