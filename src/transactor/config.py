"""
Configuration management for the transactor.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Default port of a weave node
DEFAULT_PORT = "1984"

# Local node used when no address is given
DEFAULT_URL = f"http://127.0.0.1:{DEFAULT_PORT}"


class TransactorConfig(BaseSettings):
    """
    Configuration settings for the transactor.

    All settings can be configured via environment variables with the TRANSACTOR_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSACTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Node settings
    node_url: str = Field(
        default="",
        description="Node address; empty means the local default node"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single node request"
    )

    # Confirmation polling
    poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Interval between transaction lookups while waiting to be mined"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )


# Global config instance
_config: Optional[TransactorConfig] = None


def get_config() -> TransactorConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = TransactorConfig()
    return _config


def set_config(config: TransactorConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
