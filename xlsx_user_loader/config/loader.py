from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import ConfigError

"""Config loader.

Resolution order (later wins):
1. built-in defaults (table ``userTable``, batch size 25)
2. optional YAML file
3. environment variables (TABLE_NAME, BATCH_SIZE, AWS_REGION, ERROR_LOG_DIR, LOG_LEVEL)

The merged result is validated against the bundled JSON schema.
"""

__all__ = [
    "ConfigError",
    "LoaderConfig",
    "SCHEMA_PATH",
    "DEFAULTS",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULTS: dict[str, Any] = {
    "table_name": "userTable",
    "batch_size": 25,
    "aws_region": None,
    "error_log_dir": None,
    "log_level": "INFO",
}

# env var -> config key
ENV_KEYS = {
    "TABLE_NAME": "table_name",
    "BATCH_SIZE": "batch_size",
    "AWS_REGION": "aws_region",
    "ERROR_LOG_DIR": "error_log_dir",
    "LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class LoaderConfig:
    table_name: str
    batch_size: int
    aws_region: str | None
    error_log_dir: str | None
    log_level: str


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate merged config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or data violates the schema
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for env_key, cfg_key in ENV_KEYS.items():
        value = environ.get(env_key)
        if value is None or value == "":
            continue
        if cfg_key == "batch_size":
            try:
                out[cfg_key] = int(value)
            except ValueError as e:
                raise ConfigError(f"{env_key} must be an integer (got {value!r})") from e
        else:
            out[cfg_key] = value
    return out


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> LoaderConfig:
    data: dict[str, Any] = dict(DEFAULTS)
    if path is not None:
        data.update(_read_yaml(path))
    data.update(_env_overrides(os.environ if environ is None else environ))
    if isinstance(data.get("log_level"), str):
        data["log_level"] = data["log_level"].strip().upper()

    _validate_config_schema(data)

    return LoaderConfig(
        table_name=data["table_name"],
        batch_size=data["batch_size"],
        aws_region=data["aws_region"],
        error_log_dir=data["error_log_dir"],
        log_level=data["log_level"],
    )
