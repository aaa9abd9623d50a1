from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    discord_webhook_url: Optional[str] = Field(None, alias="DISCORD_WEBHOOK_URL")
    webhook_timeout_seconds: float = Field(5.0, alias="WEBHOOK_TIMEOUT_SECONDS")

    affiliate_code_max_attempts: int = Field(100, alias="AFFILIATE_CODE_MAX_ATTEMPTS")
    affiliate_code_verify_fallback: bool = Field(False, alias="AFFILIATE_CODE_VERIFY_FALLBACK")
    affiliate_insert_attempts: int = Field(3, alias="AFFILIATE_INSERT_ATTEMPTS")

    cors_allow_origins: List[str] = Field(["*"], alias="CORS_ALLOW_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
