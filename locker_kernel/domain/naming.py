"""
Receipt naming helpers.

Pure functions that turn a position id into the name and symbol of the
position's receipt asset, e.g. ``"Wrapped Ether Lock #7"`` / ``"WETH-L7"``.
"""

from locker_kernel.db.types import MAX_UINT256
from locker_kernel.exceptions import InvalidInputError

DEFAULT_NAME_TEMPLATE = "{asset_name} Lock #{position}"
DEFAULT_SYMBOL_TEMPLATE = "{asset_symbol}-L{position}"


def to_decimal_string(n: int) -> str:
    """
    Canonical decimal text of a non-negative integer.

    No sign, no leading zeros, ``"0"`` for zero.  Total over the uint256
    range.

    Raises:
        InvalidInputError: for negatives, values above uint256, bools and
            non-integers.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidInputError("n", n, "must be an integer")
    if n < 0:
        raise InvalidInputError("n", n, "must not be negative")
    if n > MAX_UINT256:
        raise InvalidInputError("n", n, "exceeds uint256 range")
    return format(n, "d")


def receipt_name(
    asset_name: str,
    position_id: int,
    template: str = DEFAULT_NAME_TEMPLATE,
) -> str:
    return template.format(
        asset_name=asset_name,
        position=to_decimal_string(position_id),
    )


def receipt_symbol(
    asset_symbol: str,
    position_id: int,
    template: str = DEFAULT_SYMBOL_TEMPLATE,
) -> str:
    return template.format(
        asset_symbol=asset_symbol,
        position=to_decimal_string(position_id),
    )
