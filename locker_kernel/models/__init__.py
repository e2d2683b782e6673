"""Domain models for the locker kernel."""

from locker_kernel.models.index import LockedAssetIndex, ReceiptAssetIndex
from locker_kernel.models.lock_event import LockAction, LockEvent
from locker_kernel.models.position import LockPosition
from locker_kernel.models.sequence import SequenceCounter

__all__ = [
    "LockPosition",
    "LockedAssetIndex",
    "ReceiptAssetIndex",
    "LockAction",
    "LockEvent",
    "SequenceCounter",
]
