"""
Tests for ConservationAuditor.

Covers:
- Clean ledgers verify after locks and releases
- Receipt supply drift, custody shortfall and replay mismatch are reported
- Lock event chain tampering is detected
"""

import pytest
from sqlalchemy import select

from locker_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from locker_kernel.exceptions import (
    ConservationViolationError,
    EventChainBrokenError,
)
from locker_kernel.models.lock_event import LockEvent
from locker_kernel.services.conservation_service import ConservationAuditor
from locker_kernel.services.event_recorder import LockEventRecorder
from tests.conftest import ALICE, BOB, REGISTRY


@pytest.fixture
def auditor(session, gateway):
    return ConservationAuditor(session, gateway, REGISTRY)


@pytest.fixture
def unguarded():
    """Temporarily lift immutability listeners to simulate tampering."""
    unregister_immutability_listeners()
    yield
    register_immutability_listeners()


class TestConservationAuditor:

    def test_empty_ledger(self, auditor):
        report = auditor.verify()

        assert report.is_conserved
        assert report.positions_checked == 0
        assert report.events_checked == 0

    def test_after_locks_and_releases(self, auditor, token_b, clock, lock_tokens, release_tokens):
        first = lock_tokens(ALICE, 1000)
        lock_tokens(BOB, 500)
        lock_tokens(ALICE, 70, token=token_b)
        clock.advance(3600)
        release_tokens(first.receipt_asset, 400)

        report = auditor.assert_conserved()

        assert report.positions_checked == 3
        assert report.assets_checked == 2
        assert report.events_checked == 4

    def test_receipt_supply_drift(self, auditor, gateway, lock_tokens):
        result = lock_tokens(ALICE, 1000)
        # Minted outside the registry
        gateway.receipt(result.receipt_asset).balances[BOB] = 5

        report = auditor.verify()

        assert not report.is_conserved
        assert any("receipt supply 1005" in v for v in report.violations)
        with pytest.raises(ConservationViolationError) as exc_info:
            auditor.assert_conserved()
        assert exc_info.value.code == "CONSERVATION_VIOLATION"

    def test_custody_shortfall(self, auditor, token_a, lock_tokens):
        lock_tokens(ALICE, 1000)
        token_a.balances[REGISTRY] -= 1

        report = auditor.verify()

        assert report.violations == ("asset 0xtokena: custody 999 < locked 1000",)

    def test_surplus_custody_is_not_a_violation(self, auditor, token_a, lock_tokens):
        lock_tokens(ALICE, 1000)
        token_a.transfer(BOB, REGISTRY, 10)

        assert auditor.verify().is_conserved

    def test_verified_log(self, auditor, captured_logs, lock_tokens):
        lock_tokens(ALICE, 10)
        auditor.verify()

        logs = [r for r in captured_logs() if r["message"] == "conservation_verified"]
        assert logs[0]["positions_checked"] == 1
        assert logs[0]["violation_count"] == 0


class TestEventChain:

    def test_chain_links(self, session, clock, lock_tokens, release_tokens):
        result = lock_tokens(ALICE, 100)
        clock.advance(3600)
        release_tokens(result.receipt_asset, 100)

        events = session.execute(select(LockEvent).order_by(LockEvent.seq)).scalars().all()

        assert [e.seq for e in events] == [0, 1]
        assert events[0].is_genesis
        assert events[1].prev_hash == events[0].hash
        assert LockEventRecorder(session).validate_chain() == 2

    def test_tampered_payload_detected(self, session, auditor, lock_tokens, unguarded):
        lock_tokens(ALICE, 100)
        lock_tokens(ALICE, 200)
        event = session.execute(
            select(LockEvent).where(LockEvent.seq == 1)
        ).scalar_one()
        event.payload = {**event.payload, "amount": "2000"}
        session.flush()

        with pytest.raises(EventChainBrokenError) as exc_info:
            auditor.verify()
        assert exc_info.value.seq == 1

    def test_tampered_link_detected(self, session, lock_tokens, unguarded):
        lock_tokens(ALICE, 100)
        lock_tokens(ALICE, 200)
        event = session.execute(
            select(LockEvent).where(LockEvent.seq == 1)
        ).scalar_one()
        event.prev_hash = "0" * 64
        session.flush()

        with pytest.raises(EventChainBrokenError):
            LockEventRecorder(session).validate_chain()
