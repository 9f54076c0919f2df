"""Application configuration."""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    PROJECT_NAME: str = "Tagliatelle API"
    INSTANCE_NAME: str = "Tagliatelle"

    # Database
    DATABASE_URL: str = "sqlite:///./database.db"
    SQL_ECHO: bool = False

    # Storage
    UPLOAD_DIR: str = "uploads"

    # JSON document holding tag_aliases
    CONFIG_PATH: str = "config.json"

    # Listing
    ITEMS_PER_PAGE: int = Field(default=100, ge=1)

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:8080", "http://localhost"]


settings = Settings()
