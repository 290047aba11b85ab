"""Application settings and configuration."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env file if present
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API CONFIG
    api_base_url: str = Field(
        default="http://159.65.31.191/api",
        description="Base URL of the school CBT service",
        validation_alias="CBT_API_BASE_URL",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Seconds to wait for the service before giving up",
        validation_alias="CBT_REQUEST_TIMEOUT",
    )

    # Authentication
    auth_token: str | None = Field(
        default=None,
        description="Bearer token; takes precedence over the token file",
        validation_alias="CBT_AUTH_TOKEN",
    )

    token_file: Path = Field(
        default=Path.home() / ".cbt_author" / "token",
        description="Where `cbt-author login` persists the bearer token",
        validation_alias="CBT_TOKEN_FILE",
    )

    # Time handling
    timezone: str | None = Field(
        default=None,
        description="IANA zone for exam start/end input; the system zone when unset",
        validation_alias="CBT_TIMEZONE",
    )

    # Output Settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level for the cbt_author logger",
        validation_alias="CBT_LOG_LEVEL",
    )

    output_dir: str = Field(
        default="output",
        description="Directory for exported exam documents",
        validation_alias="CBT_OUTPUT_DIR",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Loaded once, then shared by the client and the CLI
@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings object with loaded configuration
    """
    return Settings()
