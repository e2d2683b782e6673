"""Selectors for the locker kernel (read side)."""

from locker_kernel.selectors.position_selector import PositionSelector

__all__ = [
    "PositionSelector",
]
