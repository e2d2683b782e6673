"""
Module: locker_kernel.models.sequence
Responsibility: Named counter rows backing SequenceService.
Architecture position: Kernel > Models.  May import from db/ only.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from locker_kernel.db.base import Base


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row represents a named sequence.  current_value is the number of
    values handed out so far, so for the position counter it is also the
    next position id.  Row-level locking keeps allocation serial.
    """

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(
        String(80),
        primary_key=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<SequenceCounter {self.name}={self.current_value}>"
