"""Configuration using pydantic-settings."""

from typing import Any, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Immutable process-wide settings snapshot."""

    host: str = "0.0.0.0"  # nosec B104 - Required for container deployment
    port: int = Field(4000, gt=0, le=65535)
    node_env: Literal["development", "production"] = "development"

    enable_redis: bool = False
    redis_url: str = "redis://localhost:6379"

    log_level: str = "INFO"
    log_dir: str = "logs"

    # Cache settings
    cache_ttl_seconds: int = Field(3600, gt=0)

    # Request lifecycle
    request_timeout_seconds: float = Field(30.0, gt=0)
    shutdown_grace_seconds: int = Field(10, ge=0)

    @property
    def is_production(self) -> bool:
        """Check if running with NODE_ENV=production."""
        return self.node_env == "production"

    class Config:
        """Pydantic config."""

        env_file = ".env"
        env_ignore_empty = True
        extra = "ignore"
        frozen = True


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment.

    Args:
        **overrides: Explicit values that take precedence over the environment.

    Returns:
        Validated, frozen Settings instance.

    Raises:
        ConfigurationError: If any value is malformed.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = ", ".join(str(error["loc"][-1]) for error in e.errors() if error["loc"])
        raise ConfigurationError(f"Invalid configuration for: {fields or 'settings'}") from e
