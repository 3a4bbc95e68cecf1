from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "SignDesk Backend"
    API_V1_STR: str = "/api"

    # Signing links
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("PUBLIC_BASE_URL", "BASE_URL"),
    )
    SIGNING_PATH: str = "/sign"

    # Storage
    STORAGE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./signdesk.db"
    DB_ECHO: bool = False
    SEED_TEMPLATES: bool = True

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILE: Optional[str] = None  # e.g. "backend.log"; stdout only when unset

    # File Storage
    UPLOAD_DIR: str = "uploads"  # Directory for storing uploaded files
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB max file size
    ALLOWED_EXTENSIONS: str = "pdf"

    # Load backend-local .env regardless of current working directory.
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def async_database_url(self) -> str:
        """DATABASE_URL rewritten for the async driver."""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def allowed_extensions(self) -> list[str]:
        return [
            e.strip().lower().lstrip(".")
            for e in (self.ALLOWED_EXTENSIONS or "").split(",")
            if e.strip()
        ]


settings = Settings()
