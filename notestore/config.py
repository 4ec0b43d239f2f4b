"""
notestore — Configuration
==========================

What:  Centralized configuration using Pydantic Settings.
How:   Values come from environment variables (or a .env file), are validated
       on load, and are exposed through the singleton `settings` object.
Who:   Imported by the HTTP client factory, backends, ImageService and NoteStore.
When:  Loaded once at import time.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    All settings have development defaults. Real deployments must provide
    FIREBASE_API_KEY and FIREBASE_DATABASE_URL.
    """

    # ── Firebase Identity ─────────────────────────────────────────────────
    # Web API key of the Firebase project (sent as ?key=...)
    firebase_api_key: str = Field(default="", description="Firebase Web API key")

    # Identity Toolkit endpoints (sign in / sign up)
    firebase_auth_url: str = Field(default="https://identitytoolkit.googleapis.com/v1")

    # Secure Token endpoint (refresh token exchange)
    firebase_token_url: str = Field(default="https://securetoken.googleapis.com/v1")

    # ── Firebase Realtime Database ────────────────────────────────────────
    # Format: https://<project>-default-rtdb.firebaseio.com
    firebase_database_url: str = Field(default="", description="Realtime Database root URL")

    # ── Image Endpoint ────────────────────────────────────────────────────
    # The upload script lives at <base>/<upload path>; base must end with "/"
    image_api_base_url: str = Field(default="http://localhost/notesapp/")
    image_upload_path: str = Field(default="upload.php")

    @field_validator("image_api_base_url")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Base URL is joined with the upload path, so it must end with '/'."""
        return v if v.endswith("/") else v + "/"

    @property
    def image_upload_url(self) -> str:
        return self.image_api_base_url + self.image_upload_path.lstrip("/")

    # ── HTTP ──────────────────────────────────────────────────────────────
    # Overall per-request timeout and the connect phase timeout, in seconds
    http_timeout: float = Field(default=30.0, ge=1.0, le=300.0)
    http_connect_timeout: float = Field(default=10.0, ge=1.0, le=60.0)

    # ── File Storage ──────────────────────────────────────────────────────
    # Where image bytes are copied before upload
    staging_dir: str = Field(default="./storage/staging")

    # Where downloaded images are written
    download_dir: str = Field(default_factory=lambda: str(Path.home() / "Downloads"))

    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    # Valid range: 1MB to 50MB
    max_file_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Checks that the Firebase settings needed by the real backend are set.
        When:  Called by NoteStore.from_settings() before building Firebase clients.
        Raises ValueError listing every missing value.
        """
        errors = []
        if not self.firebase_api_key:
            errors.append(
                "FIREBASE_API_KEY is not set. "
                "Find it under Project settings → General in the Firebase console."
            )
        if not self.firebase_database_url:
            errors.append(
                "FIREBASE_DATABASE_URL is not set "
                "(e.g. https://<project>-default-rtdb.firebaseio.com)."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the package
settings = Settings()
