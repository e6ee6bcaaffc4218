"""Prepass configuration, read from the environment and an optional .env file."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Project root .env wins over one in the working directory
_project_env = Path(__file__).parent.parent.parent / ".env"
if _project_env.exists():
    load_dotenv(_project_env)
else:
    load_dotenv(".env", verbose=False)


class Settings(BaseSettings):
    """Runtime settings; every field can be set through its alias."""

    # Gemini, either with an API key or through Vertex AI
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    use_vertex_ai: bool = Field(default=False, alias="USE_VERTEX_AI")
    gcp_project_id: str = Field(default="", alias="GCP_PROJECT_ID")
    gcp_region: str = Field(default="us-central1", alias="GCP_REGION")
    google_application_credentials: str = Field(
        default="", alias="GOOGLE_APPLICATION_CREDENTIALS"
    )

    # Storage and identity
    database_path: str = Field(default="data/prepass.db", alias="PREPASS_DATABASE_PATH")
    user_id: str = Field(default="local", min_length=1, alias="PREPASS_USER_ID")

    max_upload_mb: int = Field(default=10, gt=0, alias="PREPASS_MAX_UPLOAD_MB")

    # Study heuristics
    target_percentage: int = Field(
        default=80, ge=0, le=100, alias="PREPASS_TARGET_PERCENTAGE"
    )
    minutes_per_card: int = Field(default=2, ge=0, alias="PREPASS_MINUTES_PER_CARD")
    min_flashcards: int = Field(default=5, ge=0, alias="PREPASS_MIN_FLASHCARDS")
    min_quizzes: int = Field(default=3, ge=0, alias="PREPASS_MIN_QUIZZES")

    log_level: str = Field(default="INFO", alias="PREPASS_LOG_LEVEL")
    log_file: str = Field(default="", alias="PREPASS_LOG_FILE")

    model_config = {
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def get_settings() -> Settings:
    return Settings()


def has_gemini_config(settings: Settings | None = None) -> bool:
    """Whether enough credentials are configured to call Gemini."""
    settings = settings or get_settings()
    if settings.use_vertex_ai:
        # Vertex needs a project plus a credentials file or ambient credentials
        return bool(
            settings.gcp_project_id
            and (
                settings.google_application_credentials
                or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            )
        )
    return bool(settings.gemini_api_key)
