"""Application configuration settings.

This module defines the process-wide settings using Pydantic's BaseSettings.
Values are loaded from environment variables and an optional .env file,
providing type validation and default values. Per-upload policy lives in
``ValidationConfig``; the settings here describe the environment the
validator runs in.
"""

import tempfile
from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import NoDecode

from upload_validator.models.upload_models import UploadEnvironment
from upload_validator.services.byte_formatter import shorthand_to_bytes

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]


class Settings(BaseSettings):
    """Manages environment settings, loading them from environment variables or an .env file.

    Attributes:
        upload_max_filesize: Largest single upload the runtime accepts, in byte shorthand ("2M").
        post_max_size: Largest request body the runtime accepts, in byte shorthand ("8M").
        upload_tmp_dir: Directory where incoming uploads are spooled. System temp dir when unset.
        default_upload_dir: Destination directory used when a policy names none.
        default_locale: Locale for error messages when a policy names none.
        api_key: Key required in the X-API-Key header. The API is open when unset.
        cors_allowed_origins: List of allowed origins for CORS.
        log_level: Level of the ``upload_validator`` loggers.
    """

    upload_max_filesize: str = Field(default="2M")
    post_max_size: str = Field(default="8M")
    upload_tmp_dir: Path | None = Field(default=None)
    default_upload_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    default_locale: str = Field(default="en")

    api_key: str | None = Field(default=None)

    # NoDecode hands the raw comma-separated string to assemble_cors_origins
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
    )

    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

    @field_validator("cors_allowed_origins", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """Splits a comma-separated origin string, or falls back to the defaults."""
        if isinstance(v, str) and v:
            return [origin.strip() for origin in v.split(",")]
        elif isinstance(v, list):
            return v
        return list(DEFAULT_CORS_ORIGINS)

    @field_validator("upload_max_filesize", "post_max_size")  # type: ignore
    @classmethod
    def check_shorthand(cls, v: str) -> str:
        """Rejects size limits that cannot be read as byte shorthand."""
        shorthand_to_bytes(v)
        return v

    def environment(self) -> UploadEnvironment:
        """Returns the runtime size ceilings in bytes."""
        return UploadEnvironment(
            upload_max_filesize=shorthand_to_bytes(self.upload_max_filesize),
            post_max_size=shorthand_to_bytes(self.post_max_size),
        )


settings = Settings()
