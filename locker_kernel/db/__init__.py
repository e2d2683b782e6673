"""Database layer - engine, base classes, types, and immutability."""

from locker_kernel.db.base import Base
from locker_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from locker_kernel.db.types import MAX_UINT256, TokenAmount

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "Base",
    "MAX_UINT256",
    "TokenAmount",
]
