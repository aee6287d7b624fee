"""
Configuration loader (``darkpool_config.loader``).

Resolution order, later wins:
    1. ``PoolConfig`` defaults
    2. YAML file (explicit path, else ``$DARKPOOL_CONFIG`` if set)
    3. Environment variables

Failure modes:
    * Missing YAML file -> ``FileNotFoundError`` propagates.
    * Malformed YAML -> ``yaml.YAMLError`` propagates.
    * Unparseable, non-finite or non-integral numeric value -> default
      kept, warning logged.
    * Out-of-range value -> ``ConfigurationError`` from ``PoolConfig``.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable

import yaml

from darkpool_config.schema import PoolConfig
from darkpool_kernel.logging_config import get_logger

logger = get_logger("config")

CONFIG_PATH_ENV = "DARKPOOL_CONFIG"

# field name -> (environment variable, parser)
_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "privacy_premium_percent": ("PRIVACY_PREMIUM_PERCENT", int),
    "max_batch_size": ("MAX_BATCH_SIZE", int),
    "batch_window_seconds": ("BATCH_WINDOW_SECONDS", int),
    "dispatch_timeout_seconds": ("DISPATCH_TIMEOUT_SECONDS", float),
    "database_url": ("DATABASE_URL", str),
    "log_level": ("LOG_LEVEL", str),
    "service_name": ("SERVICE_NAME", str),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping.  An empty file yields an empty dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    # Allow the settings to be nested under a ``darkpool:`` key
    if isinstance(data.get("darkpool"), dict):
        data = data["darkpool"]
    return data


def _parse_number(raw: Any, parser: Callable[[str], Any]) -> Any:
    if isinstance(raw, bool):
        raise ValueError("boolean is not a number")
    if isinstance(raw, float) and parser is int and not raw.is_integer():
        raise ValueError("not an integer")
    if not isinstance(raw, (int, float)):
        raw = str(raw).strip()
    value = parser(raw)
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("not a finite number")
    return value


def _parse(name: str, raw: Any, parser: Callable[[str], Any], source: str) -> Any:
    if parser is str:
        return str(raw)
    try:
        return _parse_number(raw, parser)
    except (ValueError, OverflowError):
        logger.warning(
            "config_value_unparseable",
            extra={"setting": name, "value": str(raw), "source": source},
        )
        return None


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> PoolConfig:
    """Build a ``PoolConfig`` from an optional YAML file and the environment."""
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    config_path = path if path is not None else env.get(CONFIG_PATH_ENV)
    if config_path:
        file_values = load_yaml_file(Path(config_path))
        for name, (_, parser) in _FIELDS.items():
            if name in file_values and file_values[name] is not None:
                parsed = _parse(name, file_values[name], parser, str(config_path))
                if parsed is not None:
                    values[name] = parsed

    for name, (env_var, parser) in _FIELDS.items():
        raw = env.get(env_var)
        if raw is None or raw == "":
            continue
        parsed = _parse(name, raw, parser, env_var)
        if parsed is not None:
            values[name] = parsed

    config = PoolConfig(**values)
    logger.info(
        "config_loaded",
        extra={
            "source": str(config_path) if config_path else "environment",
            "privacy_premium_percent": config.privacy_premium_percent,
            "max_batch_size": config.max_batch_size,
            "batch_window_seconds": config.batch_window_seconds,
            "dispatch_timeout_seconds": config.dispatch_timeout_seconds,
        },
    )
    return config
