"""
Typed Exception Hierarchy for the Locker Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A rejected lock or release must tell the caller exactly which precondition
failed.  Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, API-safe)
  3. Structured DATA (position id, amounts, timestamps)

Example:
    try:
        registry.release(caller, receipt_address, amount)
    except NotYetReleasableError as e:
        retry_at(e.release_time)
    except InsufficientLockedError as e:
        api_response(code=e.code, remaining=e.locked_amount)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LockerKernelError (base)
    |
    +-- InvalidInputError
    |   +-- InvalidAmountError
    |   +-- InvalidReleaseTimeError
    |
    +-- AssetError
    |   +-- TransferRefusedError
    |   +-- AssetNotFoundError
    |
    +-- PositionError
    |   +-- PositionNotFoundError
    |   +-- PositionNotSetError
    |   +-- NotYetReleasableError
    |   +-- InsufficientLockedError
    |
    +-- ReentrantCallError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- AuditError
        +-- ConservationViolationError
        +-- EventChainBrokenError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                    | When Raised
--------------|-------------------------|------------------------------------------
Input         | INVALID_INPUT           | Malformed argument (wrong type)
              | INVALID_AMOUNT          | Zero, negative, or > uint256 amount
              | INVALID_RELEASE_TIME    | Negative or millisecond-scale timestamp
--------------|-------------------------|------------------------------------------
Asset         | TRANSFER_REFUSED        | transfer/transfer_from/mint/burn refused
              | ASSET_NOT_FOUND         | Gateway cannot resolve an address
--------------|-------------------------|------------------------------------------
Position      | POSITION_NOT_FOUND      | Position id outside assigned id space
              | POSITION_NOT_SET        | Receipt asset resolves to no position
              | NOT_YET_RELEASABLE      | now < release_time
              | INSUFFICIENT_LOCKED     | Release amount > remaining locked amount
--------------|-------------------------|------------------------------------------
Concurrency   | REENTRANT_CALL          | Release re-entered on the same position
--------------|-------------------------|------------------------------------------
Immutability  | IMMUTABILITY_VIOLATION  | Modifying an index row or event record
--------------|-------------------------|------------------------------------------
Audit         | CONSERVATION_VIOLATION  | Locked amount != receipt supply
              | EVENT_CHAIN_BROKEN      | Lock event hash chain mismatch

===============================================================================
"""


class LockerKernelError(Exception):
    """
    Base exception for all locker kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LOCKER_KERNEL_ERROR"


# Input validation


class InvalidInputError(LockerKernelError):
    """An argument is malformed."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class InvalidAmountError(InvalidInputError):
    """Amount is zero, negative, or outside the uint256 range."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: object, reason: str = "amount must be greater than zero"):
        super().__init__("amount", amount, reason)
        self.amount = amount


class InvalidReleaseTimeError(InvalidInputError):
    """
    Release time is not a plausible seconds-based timestamp.

    Values at or above the configured ceiling are almost always
    millisecond timestamps passed by mistake.
    """

    code: str = "INVALID_RELEASE_TIME"

    def __init__(self, release_time: object, reason: str):
        super().__init__("release_time", release_time, reason)
        self.release_time = release_time


# Asset-related exceptions


class AssetError(LockerKernelError):
    """Base exception for external asset errors."""

    code: str = "ASSET_ERROR"


class TransferRefusedError(AssetError):
    """An external asset call signaled failure."""

    code: str = "TRANSFER_REFUSED"

    def __init__(self, asset: str, operation: str, amount: int):
        self.asset = asset
        self.operation = operation
        self.amount = amount
        super().__init__(f"{operation} of {amount} refused by asset {asset}")


class AssetNotFoundError(AssetError):
    """The asset gateway cannot resolve an address."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Asset not found: {address}")


# Position-related exceptions


class PositionError(LockerKernelError):
    """Base exception for lock position errors."""

    code: str = "POSITION_ERROR"


class PositionNotFoundError(PositionError):
    """Position id is outside the assigned id space."""

    code: str = "POSITION_NOT_FOUND"

    def __init__(self, position_id: int, position_count: int):
        self.position_id = position_id
        self.position_count = position_count
        super().__init__(
            f"Position not found: {position_id} "
            f"(assigned ids are 0..{position_count - 1})"
            if position_count
            else f"Position not found: {position_id} (no positions exist)"
        )


class PositionNotSetError(PositionError):
    """Receipt asset does not resolve to an existing position."""

    code: str = "POSITION_NOT_SET"

    def __init__(self, receipt_asset: str):
        self.receipt_asset = receipt_asset
        super().__init__(f"Position not set for receipt asset {receipt_asset}")


class NotYetReleasableError(PositionError):
    """Current time precedes the position's release time."""

    code: str = "NOT_YET_RELEASABLE"

    def __init__(self, position_id: int, release_time: int, now: int):
        self.position_id = position_id
        self.release_time = release_time
        self.now = now
        super().__init__(
            f"Position {position_id} is locked until {release_time} (now {now})"
        )


class InsufficientLockedError(PositionError):
    """Release amount exceeds the remaining locked amount."""

    code: str = "INSUFFICIENT_LOCKED"

    def __init__(self, position_id: int, requested: int, locked_amount: int):
        self.position_id = position_id
        self.requested = requested
        self.locked_amount = locked_amount
        super().__init__(
            f"Cannot release {requested} from position {position_id}: "
            f"only {locked_amount} locked"
        )


# Concurrency


class ReentrantCallError(LockerKernelError):
    """A release re-entered the registry for a position already in flight."""

    code: str = "REENTRANT_CALL"

    def __init__(self, position_id: int):
        self.position_id = position_id
        super().__init__(f"Re-entrant release on position {position_id}")


# Immutability


class ImmutabilityError(LockerKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete an immutable record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Audit


class AuditError(LockerKernelError):
    """Base exception for audit errors."""

    code: str = "AUDIT_ERROR"


class ConservationViolationError(AuditError):
    """
    Locked balances and outstanding receipts have diverged.

    This is a solvency failure; investigate immediately.
    """

    code: str = "CONSERVATION_VIOLATION"

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__(
            f"Conservation violated in {len(violations)} place(s): "
            + "; ".join(violations)
        )


class EventChainBrokenError(AuditError):
    """Lock event hash chain validation failed."""

    code: str = "EVENT_CHAIN_BROKEN"

    def __init__(self, seq: int, expected_hash: str, actual_hash: str):
        self.seq = seq
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Lock event chain broken at seq {seq}: "
            f"expected {expected_hash}, got {actual_hash}"
        )
