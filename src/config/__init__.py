"""
Configuration loader.

Reads config.yaml, validates it against the packaged JSON Schema, and resolves
OAuth secrets from environment variables.
"""

from config.loader import (
    AppConfig,
    AuthConfig,
    ConfigError,
    LoggingConfig,
    load_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "ConfigError",
    "LoggingConfig",
    "load_config",
]
