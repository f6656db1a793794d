"""
Configuration module for the node configuration reconciler.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_API_URL = "https://api.fleet.example.com"


@dataclass
class APIConfig:
    """Remote fleet-management API configuration."""

    url: str = DEFAULT_API_URL
    token: str = field(default="", repr=False)  # Never log token
    request_timeout: int = 30  # seconds, per HTTP request

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        token = os.getenv("FLEET_API_TOKEN", "")
        if not token:
            raise ValueError(
                "FLEET_API_TOKEN environment variable must be set. "
                "API token cannot be empty."
            )

        return cls(
            url=os.getenv("FLEET_API_URL", DEFAULT_API_URL).rstrip("/"),
            token=token,
            request_timeout=int(os.getenv("FLEET_API_TIMEOUT", "30")),
        )


@dataclass
class TimeoutConfig:
    """Per-operation timeouts applied by the host around each lifecycle call."""

    create: int = 60  # seconds
    read: int = 60
    update: int = 60
    delete: int = 60

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            create=int(os.getenv("CREATE_TIMEOUT", "60")),
            read=int(os.getenv("READ_TIMEOUT", "60")),
            update=int(os.getenv("UPDATE_TIMEOUT", "60")),
            delete=int(os.getenv("DELETE_TIMEOUT", "60")),
        )

    def for_operation(self, operation: str) -> int:
        """Timeout for a lifecycle operation; import uses the read timeout."""
        if operation == "import":
            return self.read
        return getattr(self, operation)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class Config:
    """Main configuration object."""

    api: APIConfig
    timeouts: TimeoutConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            api=APIConfig.from_env(),
            timeouts=TimeoutConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            api=APIConfig(),
            timeouts=TimeoutConfig(),
            logging=LoggingConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
