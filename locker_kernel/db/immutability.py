"""
ORM-Level Immutability Enforcement.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity                  | Rule                              | Why
------------------------|-----------------------------------|---------------------------------
ReceiptAssetIndex       | No UPDATE, no DELETE              | A receipt asset identifies exactly
                        |                                   | one position for its lifetime
LockedAssetIndex        | No UPDATE, no DELETE              | Per-asset id lists are append-only
LockEvent               | No UPDATE, no DELETE              | The event trail is hash chained
LockPosition            | No DELETE; identity fields frozen | Positions stay queryable forever;
                        | locked_amount only decreases,     | only locked_amount may change
                        | never below zero                  |

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners below raise ImmutabilityViolationError there, which
aborts the flush and the enclosing transaction.
"""

from sqlalchemy import event, inspect

from locker_kernel.exceptions import ImmutabilityViolationError
from locker_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

# Only locked_amount may change after a position is created
POSITION_FROZEN_FIELDS = frozenset({
    "position_id",
    "locked_asset",
    "receipt_asset",
    "initial_amount",
    "release_time",
    "creator",
    "created_at",
})


def _block(entity_type: str, target, operation: str, reason: str):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": target.identity,
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=target.identity,
        reason=reason,
    )


def _check_receipt_index_update(mapper, connection, target):
    _block(
        "ReceiptAssetIndex", target, "UPDATE",
        "Receipt asset to position mapping is fixed at creation",
    )


def _check_receipt_index_delete(mapper, connection, target):
    _block(
        "ReceiptAssetIndex", target, "DELETE",
        "Receipt asset to position mapping cannot be removed",
    )


def _check_locked_index_update(mapper, connection, target):
    _block(
        "LockedAssetIndex", target, "UPDATE",
        "Locked asset position lists are append-only",
    )


def _check_locked_index_delete(mapper, connection, target):
    _block(
        "LockedAssetIndex", target, "DELETE",
        "Locked asset position lists are append-only",
    )


def _check_lock_event_update(mapper, connection, target):
    _block("LockEvent", target, "UPDATE", "Lock events are immutable")


def _check_lock_event_delete(mapper, connection, target):
    _block("LockEvent", target, "DELETE", "Lock events cannot be deleted")


def _check_position_update(mapper, connection, target):
    state = inspect(target)
    changed = sorted(
        name for name in POSITION_FROZEN_FIELDS
        if state.attrs[name].history.has_changes()
    )
    if changed:
        _block(
            "LockPosition", target, "UPDATE",
            f"Fields {', '.join(changed)} are fixed at creation",
        )

    amount = state.attrs["locked_amount"].history
    if not amount.added:
        return
    new = amount.added[0]
    old = amount.deleted[0] if amount.deleted else None
    if new is None or new < 0:
        _block(
            "LockPosition", target, "UPDATE",
            "locked_amount cannot go below zero",
        )
    if old is not None and new > old:
        _block(
            "LockPosition", target, "UPDATE",
            "locked_amount can only decrease",
        )


def _check_position_delete(mapper, connection, target):
    _block("LockPosition", target, "DELETE", "Lock positions are never deleted")


def _listeners():
    from locker_kernel.models.index import LockedAssetIndex, ReceiptAssetIndex
    from locker_kernel.models.lock_event import LockEvent
    from locker_kernel.models.position import LockPosition

    return [
        (ReceiptAssetIndex, "before_update", _check_receipt_index_update),
        (ReceiptAssetIndex, "before_delete", _check_receipt_index_delete),
        (LockedAssetIndex, "before_update", _check_locked_index_update),
        (LockedAssetIndex, "before_delete", _check_locked_index_delete),
        (LockEvent, "before_update", _check_lock_event_update),
        (LockEvent, "before_delete", _check_lock_event_delete),
        (LockPosition, "before_update", _check_position_update),
        (LockPosition, "before_delete", _check_position_delete),
    ]


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call this after all models are imported but before any database
    operations begin.  Safe to call more than once.
    """
    for target, name, fn in _listeners():
        if not event.contains(target, name, fn):
            event.listen(target, name, fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that need to tamper with records to
    verify detection.
    """
    for target, name, fn in _listeners():
        if event.contains(target, name, fn):
            event.remove(target, name, fn)
