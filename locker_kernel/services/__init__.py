"""Services for the locker kernel (write side)."""

from locker_kernel.services.conservation_service import (
    ConservationAuditor,
    ConservationReport,
)
from locker_kernel.services.event_recorder import LockEventRecorder
from locker_kernel.services.position_registry import PositionRegistry, RegistrySettings
from locker_kernel.services.sequence_service import SequenceService

__all__ = [
    "ConservationAuditor",
    "ConservationReport",
    "LockEventRecorder",
    "PositionRegistry",
    "RegistrySettings",
    "SequenceService",
]
