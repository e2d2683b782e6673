"""
ConservationAuditor -- verifies the 1:1 peg between locks and receipts.

Responsibility:
    Cross-checks the ledger against the external assets and against its
    own event trail:

    1. For every position, the receipt asset's total supply equals
       locked_amount.
    2. For every locked asset, the registry's custody balance covers the sum
       of its positions' locked amounts (solvency).
    3. For every position, initial_amount minus the RELEASED events equals
       locked_amount (replay).
    4. The lock event hash chain verifies.

Architecture position:
    Kernel > Services.  Read-only: never flushes or commits.

Failure modes:
    - ConservationViolationError from assert_conserved().
    - EventChainBrokenError propagates from the chain check.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from locker_kernel.domain.assets import AssetGateway
from locker_kernel.exceptions import ConservationViolationError
from locker_kernel.logging_config import get_logger
from locker_kernel.models.lock_event import LockAction
from locker_kernel.selectors.position_selector import PositionSelector
from locker_kernel.services.event_recorder import LockEventRecorder

logger = get_logger("services.conservation")


@dataclass(frozen=True)
class ConservationReport:
    """Outcome of one verification pass."""

    positions_checked: int
    assets_checked: int
    events_checked: int
    violations: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_conserved(self) -> bool:
        return not self.violations


class ConservationAuditor:
    """Verifies conservation across positions, custody and the event trail."""

    def __init__(
        self,
        session: Session,
        gateway: AssetGateway,
        registry_address: str,
    ):
        self._gateway = gateway
        self._registry_address = registry_address
        self._selector = PositionSelector(session)
        self._events = LockEventRecorder(session)

    def verify(self) -> ConservationReport:
        events_checked = self._events.validate_chain()

        violations: list[str] = []
        locked_by_asset: dict[str, int] = defaultdict(int)
        positions = self._selector.all_positions()

        for position in positions:
            locked_by_asset[position.locked_asset] += position.locked_amount

            supply = self._gateway.receipt(position.receipt_asset).total_supply()
            if supply != position.locked_amount:
                violations.append(
                    f"position {position.position_id}: receipt supply {supply} "
                    f"!= locked {position.locked_amount}"
                )

            released = sum(
                e.amount
                for e in self._selector.history(position.position_id)
                if e.action == LockAction.RELEASED.value
            )
            if position.initial_amount - released != position.locked_amount:
                violations.append(
                    f"position {position.position_id}: events replay to "
                    f"{position.initial_amount - released} "
                    f"!= locked {position.locked_amount}"
                )

        for locked_asset, total in sorted(locked_by_asset.items()):
            custody = self._gateway.asset(locked_asset).balance_of(self._registry_address)
            if custody < total:
                violations.append(
                    f"asset {locked_asset}: custody {custody} < locked {total}"
                )

        report = ConservationReport(
            positions_checked=len(positions),
            assets_checked=len(locked_by_asset),
            events_checked=events_checked,
            violations=tuple(violations),
        )
        log = logger.info if report.is_conserved else logger.error
        log(
            "conservation_verified",
            extra={
                "positions_checked": report.positions_checked,
                "assets_checked": report.assets_checked,
                "events_checked": report.events_checked,
                "violation_count": len(report.violations),
            },
        )
        return report

    def assert_conserved(self) -> ConservationReport:
        """verify(), raising ConservationViolationError on any violation."""
        report = self.verify()
        if not report.is_conserved:
            raise ConservationViolationError(list(report.violations))
        return report
