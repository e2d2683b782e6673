"""
Read-only query selectors.

Selectors run plain SELECTs on the caller's session and hand back frozen
DTOs from locker_kernel.domain.dtos.  They never add, flush or commit, and
MUST NOT import from services/.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from locker_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Read-only access to one primary model type."""

    def __init__(self, session: Session):
        self.session = session
