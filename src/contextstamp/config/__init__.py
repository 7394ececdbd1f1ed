"""Config module exports."""

from contextstamp.config.loader import ContextStampSettings, load_config
from contextstamp.config.models import (
    ContextStampConfig,
    DefaultsConfig,
    LoggingConfig,
    ServerConfig,
    SnapshotsConfig,
    TokensConfig,
)

__all__ = [
    "load_config",
    "ContextStampConfig",
    "ContextStampSettings",
    "DefaultsConfig",
    "LoggingConfig",
    "ServerConfig",
    "SnapshotsConfig",
    "TokensConfig",
]
