"""
Module: locker_kernel.models.index
Responsibility: The two lookup tables over the lock_positions arena.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    Receipt binding -- receipt_asset -> position_id is 1:1 and immutable
          once written (primary key, unique position_id and the
          db/immutability.py listeners).
    Per-asset position lists are append-only and keep insertion order via a
    dense ordinal per locked asset.

Both tables reference positions by position_id; neither copies any other
field of the position record.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from locker_kernel.db.base import Base


class LockedAssetIndex(Base):
    """
    One entry of a locked asset's ordered position list.

    Ordinal n is the n-th position created for this locked asset.
    """

    __tablename__ = "locked_asset_positions"

    __table_args__ = (
        UniqueConstraint("position_id", name="uq_locked_asset_position"),
    )

    locked_asset: Mapped[str] = mapped_column(
        String(66),
        primary_key=True,
    )

    ordinal: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=False,
    )

    position_id: Mapped[int] = mapped_column(
        ForeignKey("lock_positions.position_id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<LockedAssetIndex {self.locked_asset}[{self.ordinal}] -> {self.position_id}>"


class ReceiptAssetIndex(Base):
    """Maps a receipt asset to the one position it was deployed for."""

    __tablename__ = "receipt_asset_positions"

    receipt_asset: Mapped[str] = mapped_column(
        String(66),
        primary_key=True,
    )

    position_id: Mapped[int] = mapped_column(
        ForeignKey("lock_positions.position_id"),
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"<ReceiptAssetIndex {self.receipt_asset} -> {self.position_id}>"
