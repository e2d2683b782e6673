"""
Configuration Loader (``locker_config.loader``).

Responsibility
--------------
Loads a YAML file and parses it into a frozen ``LockerConfig``.  The single
public entry point for runtime config is ``locker_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown keys are rejected; missing keys take schema defaults.
* Templates must reference their placeholder and format cleanly.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  mapping for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key, wrong type or bad template  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from locker_config.schema import LockerConfig

_KNOWN_KEYS = frozenset(f.name for f in fields(LockerConfig)) - {"checksum"}
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed configuration mapping."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _require_str(data: dict[str, Any], key: str) -> None:
    if key in data and (not isinstance(data[key], str) or not data[key]):
        raise ValueError(f"{key} must be a non-empty string")


def _check_template(template: str, key: str, **placeholders: str) -> None:
    for name in placeholders:
        if "{" + name + "}" not in template:
            raise ValueError(f"{key} must contain {{{name}}}")
    try:
        template.format(**placeholders)
    except (KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"{key} is not a valid template: {exc}") from exc


def parse_config(data: dict[str, Any]) -> LockerConfig:
    """
    Parse a raw mapping into a LockerConfig.

    Raises:
        ValueError: on unknown keys or invalid values.
    """
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in (
        "registry_address",
        "receipt_name_template",
        "receipt_symbol_template",
        "database_url",
        "log_level",
    ):
        _require_str(data, key)

    if "max_release_timestamp" in data:
        value = data["max_release_timestamp"]
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError("max_release_timestamp must be a positive integer")

    if "log_level" in data:
        level = data["log_level"].upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        data = {**data, "log_level": level}

    config = LockerConfig(**data, checksum=compute_checksum(data))

    _check_template(
        config.receipt_name_template, "receipt_name_template",
        asset_name="Token", position="0",
    )
    _check_template(
        config.receipt_symbol_template, "receipt_symbol_template",
        asset_symbol="TKN", position="0",
    )
    return config


def load_config(path: Path) -> LockerConfig:
    """Load and parse one YAML configuration file."""
    logging.getLogger("locker_kernel.config").debug(
        "locker_config_file_read", extra={"path": str(path)}
    )
    return parse_config(load_yaml_file(path))
