"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable records returned across the kernel boundary: the position
    view returned by selectors, and the results of lock and release.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  ``from_model()`` converters are
    only invoked from the service and selector layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from locker_kernel.models.lock_event import LockEvent as LockEventModel
    from locker_kernel.models.position import LockPosition as LockPositionModel


@dataclass(frozen=True)
class PositionInfo:
    """Read view of one lock position."""

    position_id: int
    locked_asset: str
    receipt_asset: str
    locked_amount: int
    initial_amount: int
    release_time: int
    creator: str
    exists: bool

    @classmethod
    def from_model(cls, model: LockPositionModel) -> PositionInfo:
        return cls(
            position_id=model.position_id,
            locked_asset=model.locked_asset,
            receipt_asset=model.receipt_asset,
            locked_amount=model.locked_amount,
            initial_amount=model.initial_amount,
            release_time=model.release_time,
            creator=model.creator,
            exists=model.exists,
        )

    @property
    def released_amount(self) -> int:
        return self.initial_amount - self.locked_amount

    def is_releasable_at(self, timestamp: int) -> bool:
        return timestamp >= self.release_time


@dataclass(frozen=True)
class LockResult:
    """Outcome of a successful lock."""

    position_id: int
    locked_asset: str
    receipt_asset: str
    receipt_name: str
    receipt_symbol: str
    amount: int
    release_time: int


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a successful release."""

    position_id: int
    receipt_asset: str
    amount: int
    remaining: int


@dataclass(frozen=True)
class LockEventInfo:
    """One entry of a position's history."""

    seq: int
    position_id: int
    action: str
    actor: str
    amount: int
    block_time: int
    occurred_at: datetime

    @classmethod
    def from_model(cls, model: LockEventModel) -> LockEventInfo:
        return cls(
            seq=model.seq,
            position_id=model.position_id,
            action=str(getattr(model.action, "value", model.action)),
            actor=model.actor,
            amount=model.amount,
            block_time=model.block_time,
            occurred_at=model.occurred_at,
        )
