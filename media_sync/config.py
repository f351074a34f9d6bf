import logging
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from media_sync.exceptions import ConfigurationException

BASE_DIR = Path(__file__).resolve().parent.parent  # media-sync/

DEFAULT_TRANSPORT_URL = "http://127.0.0.1:6767"
DEFAULT_SESSION_ID = "playerctl-default"


class Settings(BaseSettings):
    """Application settings with validation.

    Every field has a working default so the service can start against a
    local playerctl bridge without any configuration. Values can be
    overridden via environment variables or a .env file.
    """

    # Media-control endpoint
    transport_url: str = Field(
        default=DEFAULT_TRANSPORT_URL,
        pattern=r"^https?://",
        description="Base URL of the media-control endpoint",
    )
    request_timeout_seconds: float = Field(gt=0, default=2.0, description="Timeout for a single field fetch")

    # Poll cycle
    poll_interval_seconds: float = Field(gt=0, default=1.0, description="Delay between poll iterations")
    default_session_id: str = Field(default=DEFAULT_SESSION_ID, description="Identifier of the default session")

    # API server settings
    api_host: str = Field(min_length=1, default="127.0.0.1", description="API server host (e.g., '0.0.0.0')")
    api_port: int = Field(ge=1, le=65535, default=8000, description="API server port")

    log_level: str = Field(default="INFO", description="Root log level")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("transport_url", mode="after")
    @classmethod
    def validate_transport_url(cls, v: str) -> str:
        """Strip whitespace and trailing slashes so field paths join cleanly."""
        v = v.strip().rstrip("/")
        if v in ("http:", "https:") or v.endswith("://"):
            raise ValueError("transport_url must include a host")
        return v

    @field_validator("default_session_id", "api_host", mode="after")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Avoids re-reading the .env file on every request. Use this with
    FastAPI's Depends() or call it directly when building the store.

    Returns:
        Cached Settings instance

    Raises:
        ConfigurationException: If the environment holds invalid values
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = Settings()
        except ValidationError as e:
            raise ConfigurationException(
                "Invalid media sync configuration",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
    return _settings_instance
