"""
Module: locker_kernel.models.position
Responsibility: ORM persistence for lock positions.  This table is the single
    arena every index points into; the record itself is never duplicated.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    Conservation -- locked_amount equals the outstanding supply of receipt_asset
          (maintained by PositionRegistry, verified by ConservationAuditor).
    Dense ids -- position_id is unique, dense and zero-based (allocated from the
          lock_position sequence counter).
    No underflow -- 0 <= locked_amount <= initial_amount (enforced by the registry
          before any mutation).
    Identity fields are frozen after INSERT and rows are never deleted
    (db/immutability.py).

Failure modes:
    - IntegrityError on duplicate position_id or receipt_asset.
    - ImmutabilityViolationError on DELETE or identity-field UPDATE.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from locker_kernel.db.base import Base
from locker_kernel.db.types import TokenAmount


class LockPosition(Base):
    """
    One lock record pairing a custodied deposit with its receipt asset.

    Contract:
        Created exactly once by PositionRegistry.lock(); mutated only by
        PositionRegistry.release(), which can only decrease locked_amount.

    Non-goals:
        - creator is recorded but is NOT an access gate on release.
          Whoever holds receipt balance may release.
    """

    __tablename__ = "lock_positions"

    __table_args__ = (
        Index("idx_lock_position_locked_asset", "locked_asset"),
        Index("idx_lock_position_creator", "creator"),
    )

    position_id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=False,
    )

    locked_asset: Mapped[str] = mapped_column(
        String(66),
        nullable=False,
    )

    # One receipt asset per position, never reused
    receipt_asset: Mapped[str] = mapped_column(
        String(66),
        nullable=False,
        unique=True,
    )

    initial_amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
    )

    # Monotonically non-increasing after creation
    locked_amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
    )

    # Seconds since epoch
    release_time: Mapped[int] = mapped_column(
        nullable=False,
    )

    creator: Mapped[str] = mapped_column(
        String(66),
        nullable=False,
    )

    exists: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<LockPosition {self.position_id}: {self.locked_amount} of "
            f"{self.locked_asset} until {self.release_time}>"
        )
