"""
Module: locker_kernel.db.types
Responsibility: Column type and validation helpers for token amounts and
    release timestamps.  Centralizes the uint256 range so
    that every model and service uses identical bounds.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Amounts are unsigned 256-bit integers: 0 <= amount <= MAX_UINT256.
      Stored as Numeric(78, 0) on PostgreSQL, decimal text elsewhere, and always
      surfaced to Python as int.  No floats, no Decimals leak out.
    - Release timestamps are seconds.  Values at or above
      DEFAULT_MAX_RELEASE_TIMESTAMP look like milliseconds and are rejected.

Failure modes:
    - InvalidAmountError on zero, negative, bool, non-int, or > MAX_UINT256.
    - InvalidReleaseTimeError on negative or millisecond-scale timestamps.
"""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

from locker_kernel.exceptions import InvalidAmountError, InvalidReleaseTimeError

MAX_UINT256 = 2**256 - 1

# First value treated as a millisecond-scale timestamp (year 2286 in seconds)
DEFAULT_MAX_RELEASE_TIMESTAMP = 10_000_000_000


class TokenAmount(TypeDecorator):
    """
    uint256 token amount, surfaced to Python as int.

    PostgreSQL stores Numeric(78, 0).  Other backends store the decimal
    text in String(78): SQLite would coerce large NUMERIC values to REAL and
    lose precision above 2**63.
    """

    impl = String(78)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(78, 0))
        return dialect.type_descriptor(String(78))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return Decimal(int(value))
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is not None:
            return int(value)
        return None


def validate_amount(amount: object) -> int:
    """
    Validate a token amount for lock/release.

    Preconditions: none (any object accepted).
    Postconditions: Returns amount iff it is an int with
        0 < amount <= MAX_UINT256.

    Raises:
        InvalidAmountError: otherwise.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount, "amount must be an integer")
    if amount <= 0:
        raise InvalidAmountError(amount)
    if amount > MAX_UINT256:
        raise InvalidAmountError(amount, "amount exceeds uint256 range")
    return amount


def validate_release_time(
    release_time: object,
    max_release_timestamp: int = DEFAULT_MAX_RELEASE_TIMESTAMP,
) -> int:
    """
    Validate a release timestamp.

    Postconditions: Returns release_time iff it is an int with
        0 <= release_time < max_release_timestamp.

    Raises:
        InvalidReleaseTimeError: otherwise.
    """
    if isinstance(release_time, bool) or not isinstance(release_time, int):
        raise InvalidReleaseTimeError(release_time, "release time must be an integer")
    if release_time < 0:
        raise InvalidReleaseTimeError(release_time, "release time must not be negative")
    if release_time >= max_release_timestamp:
        raise InvalidReleaseTimeError(
            release_time,
            f"release time must be in seconds (< {max_release_timestamp}); "
            "looks like milliseconds",
        )
    return release_time
