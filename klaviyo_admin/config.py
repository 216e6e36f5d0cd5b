"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Klaviyo
    # Handlers report a configuration error instead of failing at startup
    # when the key is missing.
    klaviyo_api_key: Optional[str] = None
    klaviyo_base_url: str = "https://a.klaviyo.com"
    klaviyo_revision: str = "2024-10-15"
    klaviyo_form_revision: str = "2025-07-15.pre"
    klaviyo_form_id: str = "SDnX9G"

    # Application
    environment: str = "development"
    cors_origins: list[str] = ["https://mkyigitoglu.framer.website"]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
