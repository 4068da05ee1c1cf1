"""
Configuration management.
Simple .env based config for running the scripts locally.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Shopify app credentials
    shopify_shop: str = "ertis-playground.myshopify.com"
    shopify_api_key: str = ""
    shopify_api_secret: Optional[str] = None
    shopify_api_version: str = "2025-07"
    
    # Fixed Admin API token (skips the session store when set)
    shopify_access_token: Optional[str] = None
    
    # Session store
    database_path: str = "./prisma/dev.sqlite"
    
    # Batch defaults
    default_max_retries: int = 6
    default_concurrency: int = 10
    
    # Logging
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
