"""Utility functions for the locker kernel."""

from locker_kernel.utils.hashing import (
    canonicalize_json,
    hash_lock_event,
    hash_payload,
)

__all__ = [
    "canonicalize_json",
    "hash_payload",
    "hash_lock_event",
]
