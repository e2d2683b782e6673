"""
Pure domain layer.

Clock, asset capability protocols, receipt naming and DTOs.  Nothing here
touches a session or performs I/O (SystemClock excepted).
"""

from locker_kernel.domain.assets import AssetGateway, FungibleAsset, ReceiptAsset
from locker_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from locker_kernel.domain.dtos import (
    LockEventInfo,
    LockResult,
    PositionInfo,
    ReleaseResult,
)
from locker_kernel.domain.naming import receipt_name, receipt_symbol, to_decimal_string

__all__ = [
    "AssetGateway",
    "FungibleAsset",
    "ReceiptAsset",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "PositionInfo",
    "LockResult",
    "ReleaseResult",
    "LockEventInfo",
    "to_decimal_string",
    "receipt_name",
    "receipt_symbol",
]
