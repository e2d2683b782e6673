"""
LockEventRecorder -- hash-chained trail of lock and release actions.

Responsibility:
    Appends a ``LockEvent`` for every successful lock and release and
    validates the resulting hash chain on demand.

Architecture position:
    Kernel > Services -- imperative shell.  Called by PositionRegistry
    inside the same SAVEPOINT as the position mutation, so an aborted
    operation leaves no event behind.

Invariants enforced:
    - Sequence numbers come from SequenceService (locked counter row).
    - hash = H(position_id | action | payload_hash | prev_hash).
    - Events are append-only (db/immutability.py).

Failure modes:
    - EventChainBrokenError from validate_chain() on any mismatch.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from locker_kernel.domain.clock import Clock, SystemClock
from locker_kernel.exceptions import EventChainBrokenError
from locker_kernel.logging_config import get_logger
from locker_kernel.models.lock_event import LockAction, LockEvent
from locker_kernel.services.sequence_service import SequenceService
from locker_kernel.utils.hashing import hash_lock_event, hash_payload

logger = get_logger("services.event_recorder")


class LockEventRecorder:
    """
    Service for creating and validating lock events.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._sequence_service = SequenceService(session)

    def _get_last_hash(self) -> str | None:
        last_event = self._session.execute(
            select(LockEvent)
            .order_by(LockEvent.seq.desc())
            .limit(1)
        ).scalar_one_or_none()

        return last_event.hash if last_event else None

    def _append(
        self,
        position_id: int,
        action: LockAction,
        actor: str,
        amount: int,
        block_time: int,
        payload: dict[str, Any],
    ) -> LockEvent:
        seq = self._sequence_service.allocate(SequenceService.LOCK_EVENT)
        prev_hash = self._get_last_hash()

        payload_hash = hash_payload(payload)
        event_hash = hash_lock_event(
            position_id=position_id,
            action=action.value,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
        )

        lock_event = LockEvent(
            seq=seq,
            position_id=position_id,
            action=action.value,
            actor=actor,
            amount=amount,
            block_time=block_time,
            occurred_at=self._clock.now(),
            payload=payload,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
            hash=event_hash,
        )
        self._session.add(lock_event)
        self._session.flush()

        logger.debug(
            "lock_event_recorded",
            extra={
                "position_id": position_id,
                "action": action.value,
                "seq": seq,
            },
        )
        return lock_event

    def record_locked(
        self,
        position_id: int,
        actor: str,
        locked_asset: str,
        receipt_asset: str,
        amount: int,
        release_time: int,
        block_time: int,
    ) -> LockEvent:
        return self._append(
            position_id=position_id,
            action=LockAction.LOCKED,
            actor=actor,
            amount=amount,
            block_time=block_time,
            payload={
                "locked_asset": locked_asset,
                "receipt_asset": receipt_asset,
                "amount": str(amount),
                "release_time": release_time,
            },
        )

    def record_released(
        self,
        position_id: int,
        actor: str,
        receipt_asset: str,
        amount: int,
        remaining: int,
        block_time: int,
    ) -> LockEvent:
        return self._append(
            position_id=position_id,
            action=LockAction.RELEASED,
            actor=actor,
            amount=amount,
            block_time=block_time,
            payload={
                "receipt_asset": receipt_asset,
                "amount": str(amount),
                "remaining": str(remaining),
            },
        )

    def validate_chain(self) -> int:
        """
        Recompute every hash in seq order.

        Returns:
            Number of events validated.

        Raises:
            EventChainBrokenError: on the first payload, link or hash mismatch.
        """
        events = self._session.execute(
            select(LockEvent).order_by(LockEvent.seq)
        ).scalars().all()

        prev_hash: str | None = None
        for lock_event in events:
            payload_hash = hash_payload(lock_event.payload or {})
            if payload_hash != lock_event.payload_hash:
                raise EventChainBrokenError(
                    lock_event.seq, lock_event.payload_hash, payload_hash
                )
            if lock_event.prev_hash != prev_hash:
                raise EventChainBrokenError(
                    lock_event.seq, str(prev_hash), str(lock_event.prev_hash)
                )
            expected = hash_lock_event(
                position_id=lock_event.position_id,
                action=LockAction(lock_event.action).value,
                payload_hash=payload_hash,
                prev_hash=prev_hash,
            )
            if expected != lock_event.hash:
                raise EventChainBrokenError(lock_event.seq, expected, lock_event.hash)
            prev_hash = lock_event.hash

        return len(events)
