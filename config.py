"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are optional to prevent application startup failure.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,  # Allow both field name and alias
        extra="ignore",
    )

    # Core authentication and security
    jwt_secret_key: Optional[str] = Field(default=None, alias="JWT_SECRET_KEY")
    token_ttl_days: int = Field(default=7, alias="TOKEN_TTL_DAYS", gt=0)

    # Document store
    database_url: str = Field(default="sqlite+aiosqlite:///./users.db", alias="DATABASE_URL")

    # CORS: browser frontends plus the Chrome extension
    cors_origins: List[str] = Field(
        default=["https://lyncx.ai", "http://localhost:3000"],
        alias="CORS_ORIGINS",
    )
    cors_origin_regex: Optional[str] = Field(default=r"chrome-extension://.*", alias="CORS_ORIGIN_REGEX")

    # Server
    port: int = Field(default=3000, alias="PORT")
    server_name: str = Field(default="lyncx-api", alias="SERVER_NAME")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")
    render: Optional[str] = Field(default=None, alias="RENDER")

    @property
    def is_production(self) -> bool:
        return bool(self.render) or (self.env is not None and self.env.lower() == "production")


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = settings.is_production
