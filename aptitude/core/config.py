from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    project_name: str = "Aptitude Assessment Engine"
    api_prefix: str = "/api/v1"
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("APTITUDE_MONGO_URI", "MONGO_URI"),
    )
    mongo_db_name: str = Field(
        default="aptitude",
        validation_alias=AliasChoices("APTITUDE_MONGO_DB_NAME", "MONGO_DB_NAME"),
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Comma-separated origins allowed for CORS (use '*' for all)",
        validation_alias=AliasChoices("APTITUDE_CORS_ORIGINS", "CORS_ORIGINS"),
    )
    admin_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("APTITUDE_ADMIN_KEY", "ADMIN_MASTER_KEY")
    )
    default_sample_limit: int = Field(
        default=10, ge=1, validation_alias=AliasChoices("APTITUDE_DEFAULT_SAMPLE_LIMIT", "DEFAULT_SAMPLE_LIMIT")
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("APTITUDE_LOG_LEVEL", "LOG_LEVEL"))

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        """Allow comma-separated or JSON array strings for CORS origins."""

        if isinstance(value, str):
            if value.strip() == "":
                return []
            if value.strip().startswith("["):
                return value
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
