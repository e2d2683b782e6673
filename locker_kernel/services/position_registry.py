"""
PositionRegistry -- the lock/release ledger.

Responsibility:
    Creates lock positions, gates withdrawal on release time, and keeps
    every position's locked amount pegged 1:1 to its receipt asset's
    outstanding supply.  Owns the position arena and both lookup indexes.

Architecture position:
    Kernel > Services -- imperative shell.  Collaborates with the external
    custodied asset and receipt assets only through the AssetGateway
    protocol (domain/assets.py).

Invariants enforced:
    Conservation -- lock mints exactly the deposited amount; release
          burns exactly the amount it returns.
    Receipt binding -- the receipt index row is written once, at creation.
    Dense ids -- position ids come from the locked ``lock_position`` counter.
    No underflow -- over-release is rejected before any mutation.
    Time gate -- release requires clock.timestamp() >= release_time.

Atomicity:
    Each operation runs inside ``gateway.atomic()`` and a SAVEPOINT
    (``session.begin_nested()``).  Any error rolls back the arena, both
    indexes, the counters and the event trail, and the gateway discards the
    external effects.  The caller still owns the outer commit.

Re-entrancy:
    External calls are synchronous and may call back into the registry.
    release() commits the decremented locked_amount (flush) before calling
    out, and refuses a nested release of a position already in flight on
    this registry (ReentrantCallError).  lock() allocates the position id
    before calling out, so a nested lock always gets the next id.

Failure modes:
    InvalidAmountError, InvalidReleaseTimeError, InvalidInputError,
    TransferRefusedError, AssetNotFoundError, PositionNotSetError,
    PositionNotFoundError, NotYetReleasableError, InsufficientLockedError,
    ReentrantCallError.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from locker_kernel.db.types import (
    DEFAULT_MAX_RELEASE_TIMESTAMP,
    validate_amount,
    validate_release_time,
)
from locker_kernel.domain.assets import AssetGateway
from locker_kernel.domain.clock import Clock, SystemClock
from locker_kernel.domain.dtos import LockResult, PositionInfo, ReleaseResult
from locker_kernel.domain.naming import (
    DEFAULT_NAME_TEMPLATE,
    DEFAULT_SYMBOL_TEMPLATE,
    receipt_name,
    receipt_symbol,
)
from locker_kernel.exceptions import (
    InsufficientLockedError,
    InvalidInputError,
    LockerKernelError,
    NotYetReleasableError,
    PositionNotSetError,
    ReentrantCallError,
    TransferRefusedError,
)
from locker_kernel.logging_config import LogContext, get_logger
from locker_kernel.models.index import LockedAssetIndex, ReceiptAssetIndex
from locker_kernel.models.position import LockPosition
from locker_kernel.selectors.position_selector import PositionSelector
from locker_kernel.services.base import BaseService
from locker_kernel.services.event_recorder import LockEventRecorder
from locker_kernel.services.sequence_service import SequenceService

logger = get_logger("services.position_registry")


@dataclass(frozen=True)
class RegistrySettings:
    """Kernel-side settings; built from locker_config by its bridge."""

    registry_address: str
    max_release_timestamp: int = DEFAULT_MAX_RELEASE_TIMESTAMP
    receipt_name_template: str = DEFAULT_NAME_TEMPLATE
    receipt_symbol_template: str = DEFAULT_SYMBOL_TEMPLATE


def _require_address(field: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidInputError(field, value, "must be a non-empty address string")
    return value


class PositionRegistry(BaseService[LockPosition]):
    """
    Service for locking and releasing custodied assets.

    Contract:
        ``lock`` pulls the deposit into the registry's custody, deploys a
        receipt asset for the new position and mints the deposit amount of
        it to the caller.  ``release`` burns receipts from the caller and
        returns the same amount of the custodied asset.

    Non-goals:
        - The creator is recorded but not checked on release: any holder of
          the receipt asset (with a burn allowance to the registry) may
          release.
        - Does NOT call ``session.commit()``.
    """

    def __init__(
        self,
        session: Session,
        gateway: AssetGateway,
        settings: RegistrySettings,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._gateway = gateway
        self._settings = settings
        self._clock = clock or SystemClock()
        self._sequence = SequenceService(session)
        self._events = LockEventRecorder(session, self._clock)
        self._selector = PositionSelector(session)
        self._in_flight: set[int] = set()

    @property
    def address(self) -> str:
        """Identity the registry acts as towards external assets."""
        return self._settings.registry_address

    # ------------------------------------------------------------------
    # lock
    # ------------------------------------------------------------------

    def lock(
        self,
        caller: str,
        locked_asset: str,
        amount: int,
        release_time: int,
    ) -> LockResult:
        """
        Lock ``amount`` of ``locked_asset`` until ``release_time``.

        Preconditions:
            - amount > 0 and within uint256.
            - 0 <= release_time < settings.max_release_timestamp (seconds).
            - caller approved the registry for at least ``amount``.

        Postconditions:
            - A new position with id == previous position count exists.
            - The caller holds ``amount`` of the new receipt asset.
            - The registry holds ``amount`` more of ``locked_asset``.
        """
        with LogContext.bind(actor=caller):
            try:
                _require_address("caller", caller)
                _require_address("locked_asset", locked_asset)
                validate_amount(amount)
                validate_release_time(
                    release_time, self._settings.max_release_timestamp
                )
                with self._gateway.atomic(), self.session.begin_nested():
                    result = self._lock(caller, locked_asset, amount, release_time)
            except LockerKernelError as exc:
                logger.warning(
                    "lock_rejected",
                    extra={
                        "code": exc.code,
                        "reason": str(exc),
                        "locked_asset": str(locked_asset),
                        "amount": str(amount),
                    },
                )
                raise

            logger.info(
                "position_locked",
                extra={
                    "position_id": result.position_id,
                    "locked_asset": result.locked_asset,
                    "receipt_asset": result.receipt_asset,
                    "amount": str(result.amount),
                    "release_time": result.release_time,
                },
            )
        return result

    def _lock(
        self,
        caller: str,
        locked_asset: str,
        amount: int,
        release_time: int,
    ) -> LockResult:
        asset = self._gateway.asset(locked_asset)
        block_time = self._clock.timestamp()

        # INVARIANT: dense ids -- id and per-asset ordinal are claimed before
        # any external call, so a re-entrant lock sorts after this one
        position_id = self._sequence.allocate(SequenceService.LOCK_POSITION)
        ordinal = self._sequence.allocate(
            SequenceService.locked_asset_sequence(locked_asset)
        )

        if not asset.transfer_from(self.address, caller, self.address, amount):
            raise TransferRefusedError(locked_asset, "transfer_from", amount)

        name = receipt_name(
            asset.name(), position_id, self._settings.receipt_name_template
        )
        symbol = receipt_symbol(
            asset.symbol(), position_id, self._settings.receipt_symbol_template
        )
        receipt = self._gateway.deploy_receipt(name, symbol, minter=self.address)

        # INVARIANT: conservation -- mint exactly the custodied amount
        if not receipt.mint(self.address, caller, amount):
            raise TransferRefusedError(receipt.address, "mint", amount)

        position = LockPosition(
            position_id=position_id,
            locked_asset=locked_asset,
            receipt_asset=receipt.address,
            initial_amount=amount,
            locked_amount=amount,
            release_time=release_time,
            creator=caller,
            exists=True,
            created_at=self._clock.now(),
        )
        self.session.add(position)
        self.session.flush()

        self.session.add(
            LockedAssetIndex(
                locked_asset=locked_asset,
                ordinal=ordinal,
                position_id=position_id,
            )
        )
        # INVARIANT: receipt binding -- written once, immutable afterwards
        self.session.add(
            ReceiptAssetIndex(
                receipt_asset=receipt.address,
                position_id=position_id,
            )
        )
        self.session.flush()

        self._events.record_locked(
            position_id=position_id,
            actor=caller,
            locked_asset=locked_asset,
            receipt_asset=receipt.address,
            amount=amount,
            release_time=release_time,
            block_time=block_time,
        )

        return LockResult(
            position_id=position_id,
            locked_asset=locked_asset,
            receipt_asset=receipt.address,
            receipt_name=name,
            receipt_symbol=symbol,
            amount=amount,
            release_time=release_time,
        )

    # ------------------------------------------------------------------
    # release
    # ------------------------------------------------------------------

    def release(
        self,
        caller: str,
        receipt_asset: str,
        amount: int,
    ) -> ReleaseResult:
        """
        Redeem ``amount`` receipts of one position for the custodied asset.

        Preconditions:
            - amount > 0.
            - receipt_asset identifies an existing position.
            - clock.timestamp() >= the position's release_time.
            - amount <= the position's locked_amount.
            - caller holds ``amount`` receipts and allowed the registry to
              burn them.

        Postconditions:
            - locked_amount, the caller's receipt balance and the receipt
              supply all fell by ``amount``; the caller received ``amount``
              of the custodied asset.
        """
        with LogContext.bind(actor=caller, receipt_asset=receipt_asset):
            try:
                _require_address("caller", caller)
                _require_address("receipt_asset", receipt_asset)
                validate_amount(amount)
                with self._gateway.atomic(), self.session.begin_nested():
                    result = self._release(caller, receipt_asset, amount)
            except LockerKernelError as exc:
                logger.warning(
                    "release_rejected",
                    extra={
                        "code": exc.code,
                        "reason": str(exc),
                        "amount": str(amount),
                    },
                )
                raise

            logger.info(
                "position_released",
                extra={
                    "position_id": result.position_id,
                    "amount": str(result.amount),
                    "remaining": str(result.remaining),
                },
            )
        return result

    def _release(
        self,
        caller: str,
        receipt_asset: str,
        amount: int,
    ) -> ReleaseResult:
        index = self.session.execute(
            select(ReceiptAssetIndex)
            .where(ReceiptAssetIndex.receipt_asset == receipt_asset)
        ).scalar_one_or_none()
        if index is None:
            raise PositionNotSetError(receipt_asset)

        position_id = index.position_id
        if position_id in self._in_flight:
            raise ReentrantCallError(position_id)

        self._in_flight.add(position_id)
        try:
            return self._release_position(caller, position_id, receipt_asset, amount)
        finally:
            self._in_flight.discard(position_id)

    def _release_position(
        self,
        caller: str,
        position_id: int,
        receipt_asset: str,
        amount: int,
    ) -> ReleaseResult:
        position = self.session.execute(
            select(LockPosition)
            .where(LockPosition.position_id == position_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if position is None or not position.exists:
            raise PositionNotSetError(receipt_asset)

        # INVARIANT: time gate -- one-sided time gate, no expiry
        now = self._clock.timestamp()
        if now < position.release_time:
            raise NotYetReleasableError(position_id, position.release_time, now)

        # INVARIANT: no underflow -- reject before mutating anything
        if amount > position.locked_amount:
            raise InsufficientLockedError(position_id, amount, position.locked_amount)

        # State first, then external calls
        position.locked_amount = position.locked_amount - amount
        self.session.flush()

        receipt = self._gateway.receipt(receipt_asset)
        if not receipt.burn_from(self.address, caller, amount):
            raise TransferRefusedError(receipt_asset, "burn_from", amount)

        asset = self._gateway.asset(position.locked_asset)
        if not asset.transfer(self.address, caller, amount):
            raise TransferRefusedError(position.locked_asset, "transfer", amount)

        self._events.record_released(
            position_id=position_id,
            actor=caller,
            receipt_asset=receipt_asset,
            amount=amount,
            remaining=position.locked_amount,
            block_time=now,
        )

        return ReleaseResult(
            position_id=position_id,
            receipt_asset=receipt_asset,
            amount=amount,
            remaining=position.locked_amount,
        )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def get_position(self, position_id: int) -> PositionInfo:
        """Raises PositionNotFoundError if position_id was never assigned."""
        return self._selector.get_position(position_id)

    def position_count(self) -> int:
        return self._selector.position_count()
