"""
Tests for SequenceService.

Position ids must be dense and zero-based, and a rolled back allocation
must hand the same value out again.
"""

from locker_kernel.services.sequence_service import SequenceService


class TestSequenceService:

    def test_first_allocation_is_zero(self, session):
        service = SequenceService(session)
        assert service.allocate(SequenceService.LOCK_POSITION) == 0

    def test_allocations_are_dense(self, session):
        service = SequenceService(session)
        values = [service.allocate(SequenceService.LOCK_POSITION) for _ in range(5)]
        assert values == [0, 1, 2, 3, 4]
        assert service.current_value(SequenceService.LOCK_POSITION) == 5

    def test_sequences_are_independent(self, session):
        service = SequenceService(session)
        service.allocate(SequenceService.LOCK_POSITION)
        service.allocate(SequenceService.LOCK_POSITION)

        assert service.allocate(SequenceService.LOCK_EVENT) == 0
        assert service.current_value(SequenceService.LOCK_POSITION) == 2

    def test_current_value_of_unused_sequence(self, session):
        assert SequenceService(session).current_value("never_used") == 0

    def test_rolled_back_allocation_is_reissued(self, session):
        service = SequenceService(session)
        service.allocate(SequenceService.LOCK_POSITION)

        savepoint = session.begin_nested()
        assert service.allocate(SequenceService.LOCK_POSITION) == 1
        savepoint.rollback()

        assert service.allocate(SequenceService.LOCK_POSITION) == 1

    def test_rolled_back_first_use(self, session):
        service = SequenceService(session)

        savepoint = session.begin_nested()
        service.allocate("fresh")
        savepoint.rollback()

        assert service.current_value("fresh") == 0
        assert service.allocate("fresh") == 0
