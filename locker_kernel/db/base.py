"""
Module: locker_kernel.db.base
Responsibility: Declarative base for the locker tables.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel; MUST NOT import from models/, services/, selectors/ or domain/.

Every table is keyed by its business identifier (position_id, seq,
receipt_asset, counter name) rather than a surrogate key.  Those
identifiers are assigned by the registry and never change, so the primary
key doubles as the lookup index.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all locker models.

    ``int`` columns default to BigInteger (ids, sequence values and
    second-resolution timestamps).  uint256 amounts opt into TokenAmount.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        int: BigInteger,
    }

    @property
    def identity(self) -> str:
        """Primary key as text, for logs and error messages."""
        key = self.__mapper__.primary_key_from_instance(self)
        return "/".join(str(part) for part in key)
