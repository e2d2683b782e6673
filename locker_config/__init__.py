"""
locker_config -- single public entrypoint for locker configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Sits above ``locker_kernel``.  The kernel MUST NEVER import from
    ``locker_config``; ``locker_config.bridges`` translates the config into
    kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the selected file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``locker_config_loaded`` log entry with the source path and checksum.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from locker_config.loader import load_config
from locker_config.schema import LockerConfig

_logger = logging.getLogger("locker_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_ENV_VAR = "LOCKER_CONFIG"


def get_active_config(path: Path | str | None = None) -> LockerConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: explicit ``path``, then the ``LOCKER_CONFIG``
    environment variable, then ``locker_config/sets/default.yaml``.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or _DEFAULT_CONFIG_PATH
    path = Path(path)

    config = load_config(path)

    _logger.info(
        "locker_config_loaded",
        extra={
            "path": str(path),
            "checksum": config.checksum,
            "registry_address": config.registry_address,
        },
    )
    return config


__all__ = [
    "CONFIG_ENV_VAR",
    "LockerConfig",
    "get_active_config",
]
