"""
BaseService -- common shape of the write-side services.

Services mutate state through the caller's Session with ``flush()`` and
SAVEPOINTs.  They never commit: ``session_scope()`` or the embedding
application owns the outer transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from locker_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Write-side service over one primary model type."""

    def __init__(self, session: Session):
        self.session = session
