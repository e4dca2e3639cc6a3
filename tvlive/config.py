"""
Configuration management for the live TV backend.
Uses pydantic-settings for environment variable loading.
"""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_M3U_URL = "https://raw.githubusercontent.com/Free-TV/IPTV/master/playlist.m3u8"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    app_name: str = "Live TV"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS Configuration
    # Default allows all origins for development; set TVLIVE_CORS_ORIGINS for production
    cors_origins: list[str] = ["*"]

    # Rate Limiting
    rate_limit_per_minute: int = 100

    # Playlist source
    default_m3u_url: str = DEFAULT_M3U_URL
    # Remote settings endpoint returning {"m3u_url": ...}; unset means use the default
    settings_api_url: Optional[str] = None
    fetch_timeout_seconds: float = 30.0
    load_on_startup: bool = True

    # Classification
    home_country: str = "Brasil"

    # Adaptive engine configuration
    engine_enable_worker: bool = True
    engine_low_latency_mode: bool = True
    engine_back_buffer_length: int = 90

    # Database
    database_path: str = "data/tvlive.db"

    # Admin API key for protected endpoints
    admin_api_key: str = "dev-admin-key"

    # Pydantic V2 configuration
    model_config = SettingsConfigDict(env_prefix="TVLIVE_", env_file=".env")

    def engine_config(self) -> dict:
        """Configuration handed to the adaptive engine constructor."""
        return {
            "enableWorker": self.engine_enable_worker,
            "lowLatencyMode": self.engine_low_latency_mode,
            "backBufferLength": self.engine_back_buffer_length,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
