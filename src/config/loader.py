"""
Config loader: YAML file -> frozen dataclass tree, validated against JSON Schema.

OAuth secrets resolved from environment variables (TDA_CLIENT_ID, TDA_REFRESH_TOKEN).
Config file holds only non-secret values.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from client.auth import DEFAULT_HOST

logger = logging.getLogger("tda.config")

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "client_config.schema.json"


class ConfigError(Exception):
    """Raised when config loading or validation fails."""


@dataclass(frozen=True)
class AuthConfig:
    client_id: str = ""
    refresh_token: str = ""
    refresh_interval_s: float | None = None


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    structured_logs: bool = True


@dataclass(frozen=True)
class AppConfig:
    host: str = DEFAULT_HOST
    account_id: str = ""
    timeout: float = 10.0
    auth: AuthConfig = AuthConfig()
    logging: LoggingConfig = LoggingConfig()


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    """Validate *data* against the JSON Schema at *schema_path*."""
    if not schema_path.exists():
        raise ConfigError(f"Schema file not found: {schema_path}")
    with open(schema_path) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ConfigError(f"Config validation failed: {exc.message}") from exc


def load_config(
    path: str | Path = "config.yaml",
    schema_path: str | Path | None = None,
) -> AppConfig:
    """
    Load configuration from a YAML file.

    OAuth credentials are resolved from environment variables:
      - TDA_CLIENT_ID
      - TDA_REFRESH_TOKEN
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    _validate_schema(raw, Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH)

    auth_raw = raw.get("auth", {})
    interval = auth_raw.get("refresh_interval_s")
    auth_cfg = AuthConfig(
        client_id=os.environ.get("TDA_CLIENT_ID", ""),
        refresh_token=os.environ.get("TDA_REFRESH_TOKEN", ""),
        refresh_interval_s=float(interval) if interval is not None else None,
    )

    log_raw = raw.get("logging", {})
    log_cfg = LoggingConfig(
        level=str(log_raw.get("level", "INFO")).upper(),
        structured_logs=bool(log_raw.get("structured_logs", True)),
    )

    cfg = AppConfig(
        host=raw.get("host", DEFAULT_HOST),
        account_id=str(raw.get("account_id", "")),
        timeout=float(raw.get("timeout", 10.0)),
        auth=auth_cfg,
        logging=log_cfg,
    )
    logger.debug("Loaded config from %s (host=%s)", config_path, cfg.host)
    return cfg
