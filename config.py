"""Configuration settings using Pydantic"""
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    app_name: str = Field(default="Travel Desk API", alias="APP_NAME")
    env: str = Field(default="development", alias="ENV")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_path: Optional[str] = Field(default=None, alias="LOG_PATH")

    # Storage: "sql" (SQLAlchemy) or "memory" (process-local, lost on restart)
    store_backend: str = Field(default="sql", alias="STORE_BACKEND")
    database_url: str = Field(default="sqlite:///./travel_desk.db", alias="DATABASE_URL")
    database_timeout_seconds: float = Field(default=5.0, alias="DATABASE_TIMEOUT_SECONDS")

    # CORS Settings
    allowed_origins: str = Field(
        default="*",
        alias="ALLOWED_ORIGINS",
        description="Comma-separated list of allowed origins for CORS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
