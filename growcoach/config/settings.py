"""Application settings and configuration."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GROWCOACH_",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    debug: bool = False

    # Monitoring
    log_level: str = "INFO"
    log_json: bool = False

    # Durable store
    store_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite+aiosqlite:///./growcoach.db"

    # AI APIs
    ai_provider: Literal["openai", "anthropic"] = "openai"
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    ai_model: str = "gpt-4o-mini"
    ai_max_tokens: int = Field(default=1024, gt=0)
    ai_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Sessions
    session_cache_max_entries: int = Field(default=1000, ge=1)
    max_user_text_length: int = Field(default=5000, ge=1)
    history_page_size: int = Field(default=25, ge=1)
    history_max_page_size: int = Field(default=100, ge=1)
    default_coach_type: str = "akito"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
