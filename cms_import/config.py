# cms_import/config.py
"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Importer settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="PostgreSQL connection URL",
    )

    # Checkpoint storage
    STORAGE_PROVIDER: str = Field(
        default="local",
        description="Checkpoint storage provider: local, s3",
    )
    LOCAL_STORAGE_PATH: str = Field(
        default="./storage",
        description="Base directory for the local checkpoint provider",
    )
    S3_BUCKET: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str = "us-east-1"

    # Import run
    IMPORT_FILE: str = Field(
        default="/tmp/cms_import_data.jsonl",
        description="Default input path (line-delimited JSON, optionally .gz)",
    )
    IMPORT_BATCH_SIZE: int = Field(
        default=100,
        description="Stories per batch write",
    )
    IMPORT_CHECKPOINT_EVERY: int = Field(
        default=500,
        description="Persist a progress snapshot each time this many stories have been read",
    )
    IMPORT_PROGRESS_KEY: str = Field(
        default="cms_import/progress.json",
        description="Checkpoint store key for the progress snapshot",
    )
    IMPORT_ERROR_LOG: str = Field(
        default="/tmp/cms_import_errors.log",
        description="Append-only error log path",
    )
    IMPORT_IMAGE_BASE_URL: str = Field(
        default="https://images.sabq.org/",
        description="Prefix joined onto image storage keys",
    )
    IMPORT_SOURCE_MARKER: str = Field(
        default="quintype",
        description="Provenance marker stored on imported articles",
    )
    IMPORT_AUTHOR_ID: str | None = Field(
        default=None,
        description="Author assigned to imported articles. Empty = first admin user.",
    )
    IMPORT_MAX_TAGS_PER_STORY: int = Field(
        default=10,
        description="Only the first N tags of a story are linked",
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit single-line JSON logs instead of human-readable lines",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("IMPORT_BATCH_SIZE", "IMPORT_CHECKPOINT_EVERY", "IMPORT_MAX_TAGS_PER_STORY")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached importer settings. Call at startup to validate config."""
    return Settings()
