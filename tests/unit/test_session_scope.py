"""Tests for session_scope() commit / rollback behaviour."""

import pytest
from sqlalchemy import delete, select

from locker_kernel.db.engine import get_session, is_postgres, session_scope
from locker_kernel.models.sequence import SequenceCounter
from locker_kernel.services.sequence_service import SequenceService

SCOPE_SEQUENCE = "session_scope_test"


@pytest.fixture
def scoped(db_tables):
    yield
    with session_scope() as session:
        session.execute(delete(SequenceCounter).where(SequenceCounter.name == SCOPE_SEQUENCE))


def _committed_value() -> int | None:
    session = get_session()
    try:
        return session.execute(
            select(SequenceCounter.current_value).where(SequenceCounter.name == SCOPE_SEQUENCE)
        ).scalar_one_or_none()
    finally:
        session.close()


class TestSessionScope:

    def test_commits_on_success(self, scoped):
        with session_scope() as session:
            SequenceService(session).allocate(SCOPE_SEQUENCE)

        assert _committed_value() == 1

    def test_rolls_back_on_error(self, scoped, captured_logs):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                SequenceService(session).allocate(SCOPE_SEQUENCE)
                raise RuntimeError("boom")

        assert _committed_value() is None
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())

    def test_backend_detection(self, db_engine):
        assert is_postgres() == (db_engine.dialect.name == "postgresql")
