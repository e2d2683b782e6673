"""
Position query selector.

Read-only access to lock positions through the arena and its two indexes.

Key design decisions:
- Returns PositionInfo / LockEventInfo DTOs, never ORM models
- Uses the caller's Session
- position_count() reads the lock_position counter, the same source that
  assigns ids, so "count == next id" holds by construction
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from locker_kernel.domain.dtos import LockEventInfo, PositionInfo
from locker_kernel.exceptions import PositionNotFoundError, PositionNotSetError
from locker_kernel.models.index import LockedAssetIndex, ReceiptAssetIndex
from locker_kernel.models.lock_event import LockEvent
from locker_kernel.models.position import LockPosition
from locker_kernel.models.sequence import SequenceCounter
from locker_kernel.selectors.base import BaseSelector

POSITION_SEQUENCE = "lock_position"


class PositionSelector(BaseSelector[LockPosition]):
    """Selector for lock position queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def position_count(self) -> int:
        """Number of positions ever created; also the next id to assign."""
        value = self.session.execute(
            select(SequenceCounter.current_value)
            .where(SequenceCounter.name == POSITION_SEQUENCE)
        ).scalar_one_or_none()
        return value or 0

    def get_position(self, position_id: int) -> PositionInfo:
        """
        Fetch a position by id.

        Raises:
            PositionNotFoundError: if position_id is outside 0..count-1.
        """
        count = self.position_count()
        if (
            isinstance(position_id, bool)
            or not isinstance(position_id, int)
            or not 0 <= position_id < count
        ):
            raise PositionNotFoundError(position_id, count)

        position = self.session.execute(
            select(LockPosition).where(LockPosition.position_id == position_id)
        ).scalar_one()
        return PositionInfo.from_model(position)

    def position_for_receipt(self, receipt_asset: str) -> PositionInfo:
        """
        Resolve a position by its receipt asset.

        Raises:
            PositionNotSetError: if no position was created for receipt_asset.
        """
        position = self.session.execute(
            select(LockPosition)
            .join(
                ReceiptAssetIndex,
                ReceiptAssetIndex.position_id == LockPosition.position_id,
            )
            .where(ReceiptAssetIndex.receipt_asset == receipt_asset)
        ).scalar_one_or_none()
        if position is None or not position.exists:
            raise PositionNotSetError(receipt_asset)
        return PositionInfo.from_model(position)

    def position_ids_for_locked_asset(self, locked_asset: str) -> list[int]:
        """Position ids for one locked asset, in creation order."""
        return list(
            self.session.execute(
                select(LockedAssetIndex.position_id)
                .where(LockedAssetIndex.locked_asset == locked_asset)
                .order_by(LockedAssetIndex.ordinal)
            ).scalars()
        )

    def positions_for_locked_asset(self, locked_asset: str) -> list[PositionInfo]:
        rows = self.session.execute(
            select(LockPosition)
            .join(
                LockedAssetIndex,
                LockedAssetIndex.position_id == LockPosition.position_id,
            )
            .where(LockedAssetIndex.locked_asset == locked_asset)
            .order_by(LockedAssetIndex.ordinal)
        ).scalars()
        return [PositionInfo.from_model(p) for p in rows]

    def total_locked(self, locked_asset: str) -> int:
        """Sum of remaining locked amounts across one asset's positions."""
        return sum(p.locked_amount for p in self.positions_for_locked_asset(locked_asset))

    def all_positions(self) -> list[PositionInfo]:
        rows = self.session.execute(
            select(LockPosition).order_by(LockPosition.position_id)
        ).scalars()
        return [PositionInfo.from_model(p) for p in rows]

    def history(self, position_id: int) -> list[LockEventInfo]:
        """LOCKED/RELEASED events of one position, oldest first."""
        self.get_position(position_id)
        rows = self.session.execute(
            select(LockEvent)
            .where(LockEvent.position_id == position_id)
            .order_by(LockEvent.seq)
        ).scalars()
        return [LockEventInfo.from_model(e) for e in rows]

    def event_count(self) -> int:
        return self.session.execute(
            select(func.count()).select_from(LockEvent)
        ).scalar_one()
