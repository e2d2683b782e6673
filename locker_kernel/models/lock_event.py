"""
Module: locker_kernel.models.lock_event
Responsibility: ORM persistence for the append-only, hash-chained trail of
    lock and release actions.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: no UPDATE or DELETE (db/immutability.py).
    - Hash chain: hash = H(position_id | action | payload_hash | prev_hash).
      Written by LockEventRecorder, validated by LockEventRecorder.validate_chain().
    - seq is monotonically increasing, allocated by SequenceService.

Audit relevance:
    Replaying the trail reproduces every position's locked_amount:
    locked_amount == LOCKED.amount - sum(RELEASED.amount).
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, BigInteger, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from locker_kernel.db.base import Base
from locker_kernel.db.types import TokenAmount


class LockAction(str, Enum):
    """Types of recorded position actions."""

    LOCKED = "locked"
    RELEASED = "released"


class LockEvent(Base):
    """
    One recorded lock or release.

    Guarantees:
        - seq is globally unique and monotonically increasing.
        - prev_hash is None only for the genesis event.
    """

    __tablename__ = "lock_events"

    __table_args__ = (
        Index("idx_lock_event_position", "position_id", "seq"),
        Index("idx_lock_event_action", "action"),
    )

    seq: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    position_id: Mapped[int] = mapped_column(
        nullable=False,
    )

    action: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    # Caller that performed the action
    actor: Mapped[str] = mapped_column(
        String(66),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(
        TokenAmount(),
        nullable=False,
    )

    # Ledger clock reading (seconds) the action was validated against
    block_time: Mapped[int] = mapped_column(
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    payload: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )

    payload_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    prev_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<LockEvent #{self.seq} {LockAction(self.action).value} position={self.position_id}>"

    @property
    def is_genesis(self) -> bool:
        return self.prev_hash is None
