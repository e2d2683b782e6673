"""
Config -> Kernel Bridges.

Converts a LockerConfig into kernel inputs.  These live in locker_config
(the producer) because the kernel must never import locker_config.

Usage:
    config = get_active_config()
    configure_kernel_logging(config)
    build_engine(config)
    registry = PositionRegistry(session, gateway, build_registry_settings(config))
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.engine import Engine

from locker_config.schema import LockerConfig
from locker_kernel.db.engine import init_engine_from_url
from locker_kernel.logging_config import configure_logging
from locker_kernel.services.position_registry import RegistrySettings


def build_registry_settings(config: LockerConfig) -> RegistrySettings:
    return RegistrySettings(
        registry_address=config.registry_address,
        max_release_timestamp=config.max_release_timestamp,
        receipt_name_template=config.receipt_name_template,
        receipt_symbol_template=config.receipt_symbol_template,
    )


def configure_kernel_logging(
    config: LockerConfig,
    handler: logging.Handler | None = None,
) -> None:
    """Configure locker_kernel logging at the configured level.

    configure_logging() only honours its first call, so run this before
    build_engine(), which configures logging with defaults otherwise.
    """
    configure_logging(level=config.log_level, handler=handler)


def build_engine(config: LockerConfig, **engine_options: Any) -> Engine:
    """Initialize the kernel engine against ``config.database_url``.

    ``engine_options`` are passed through to init_engine_from_url
    (echo, pool_size, max_overflow, pool_timeout).
    """
    return init_engine_from_url(config.database_url, **engine_options)
