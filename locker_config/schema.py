"""
LockerConfig schema.

The frozen runtime configuration for a locker deployment.  YAML files are
parsed into this type by the loader; nothing else reads configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

from locker_kernel.db.types import DEFAULT_MAX_RELEASE_TIMESTAMP
from locker_kernel.domain.naming import DEFAULT_NAME_TEMPLATE, DEFAULT_SYMBOL_TEMPLATE

DEFAULT_REGISTRY_ADDRESS = "0x00000000000000000000000000000000000010cc"
DEFAULT_DATABASE_URL = "sqlite:///:memory:"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class LockerConfig:
    """Runtime configuration for one registry deployment."""

    registry_address: str = DEFAULT_REGISTRY_ADDRESS
    max_release_timestamp: int = DEFAULT_MAX_RELEASE_TIMESTAMP
    receipt_name_template: str = DEFAULT_NAME_TEMPLATE
    receipt_symbol_template: str = DEFAULT_SYMBOL_TEMPLATE
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL
    checksum: str = ""
