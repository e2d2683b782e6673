"""
SequenceService -- dense sequence allocation via locked counter rows.

Responsibility:
    Hands out dense, zero-based, strictly increasing values for named
    sequences: position ids (``lock_position``), lock event ordering
    (``lock_event``) and per-asset index ordinals
    (``locked_asset:<address>``).  Uses a counter table with row-level locking
    (``SELECT ... FOR UPDATE``) so allocation is serial under concurrency.

Invariants enforced:
    Dense ids -- position ids are dense, zero-based and assigned in creation order.
          The counter row is the sole source of truth; the aggregate
          max-plus-one pattern is never used.
    Transactional -- an allocation is only visible once the caller's
          transaction commits.  Rollback returns the value, so ids stay dense.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via savepoint
      rollback and re-read).
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from locker_kernel.logging_config import get_logger
from locker_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Service for allocating transactional sequence values.

    Usage:
        with session.begin_nested():
            position_id = sequence_service.allocate(SequenceService.LOCK_POSITION)
            # If the savepoint rolls back, position_id is not consumed
    """

    LOCK_POSITION = "lock_position"
    LOCK_EVENT = "lock_event"

    @staticmethod
    def locked_asset_sequence(locked_asset: str) -> str:
        """Name of the counter ordering one locked asset's positions."""
        return f"locked_asset:{locked_asset}"

    def __init__(self, session: Session):
        self._session = session

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def allocate(self, sequence_name: str) -> int:
        """
        Allocate the next value of a named sequence.

        Postconditions:
            - Returns the pre-increment counter value (0 on first use).
            - The counter row is locked until the transaction completes.
        """
        counter = self._locked_counter(sequence_name)

        if counter is None:
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=0)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._locked_counter(sequence_name)
                assert counter is not None

        value = counter.current_value
        counter.current_value = value + 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": value},
        )
        return value

    def current_value(self, sequence_name: str) -> int:
        """
        Number of values allocated so far, without incrementing.

        For LOCK_POSITION this is both the position count and the next id.
        """
        value = self._session.execute(
            select(SequenceCounter.current_value)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

        return value or 0
