"""
Single-schedule vesting wallet.

Holds a pool earmarked for one beneficiary per asset and releases it linearly.
The native asset and each token asset get their own schedule, created lazily by
`initialize` and tracked independently.
"""
import threading
from typing import Dict, List, Optional, Tuple

import structlog

from vestledger.exceptions import (
    AlreadyInitialized,
    InsufficientVested,
    InvariantViolation,
    NotInitialized,
    NotRevocable,
    Unauthorized,
)
from vestledger.models.vesting import VestingSchedule
from vestledger.services.authorization import Authorizer
from vestledger.services.clock import Clock
from vestledger.services.event_log import EventLog, EventType
from vestledger.services.ledger import NATIVE_ASSET, AssetLedger

logger = structlog.get_logger()


class VestingWallet:
    """Vesting container releasing each asset to its beneficiary over time."""

    def __init__(
        self,
        address: str,
        ledger: AssetLedger,
        authorizer: Authorizer,
        clock: Clock,
        event_log: Optional[EventLog] = None,
    ):
        """
        Initialize the vesting wallet.

        Args:
            address: Ledger account holding the wallet's funds
            ledger: Asset ledger payouts and refunds are made through
            authorizer: Gate for owner-only operations
            clock: Source of the current timestamp
            event_log: Where Released/Revoked events are recorded
        """
        self.address = address
        self.ledger = ledger
        self.authorizer = authorizer
        self.clock = clock
        self.event_log = event_log if event_log is not None else EventLog()
        self._schedules: Dict[str, VestingSchedule] = {}
        self._lock = threading.RLock()

    def initialize(
        self,
        caller: str,
        beneficiary: str,
        total_amount: int,
        start: int,
        duration: int,
        cliff: Optional[int] = None,
        revocable: bool = True,
        asset: str = NATIVE_ASSET,
    ) -> VestingSchedule:
        """
        Create the schedule for `asset`. Owner-only and one-shot per asset.

        Args:
            caller: Account performing the call
            beneficiary: Account receiving released funds
            total_amount: Amount released over the whole schedule
            start: Timestamp accrual begins at
            duration: Length of the linear ramp
            cliff: Timestamp before which nothing releases (defaults to start)
            revocable: Whether the owner may revoke the schedule later
            asset: Asset the schedule pays out

        Returns:
            The created VestingSchedule
        """
        self.authorizer.require_authorized(caller)

        with self._lock:
            if asset in self._schedules:
                raise AlreadyInitialized(f"Vesting for {asset} is already initialized", asset=asset)

            schedule = VestingSchedule.create(
                beneficiary=beneficiary,
                total_amount=total_amount,
                start=start,
                duration=duration,
                cliff=cliff,
                revocable=revocable,
            )
            self._schedules[asset] = schedule

        logger.info(
            "Vesting wallet initialized",
            wallet=self.address,
            asset=asset,
            beneficiary=beneficiary,
            total_amount=total_amount,
            start=start,
            duration=duration,
            cliff=schedule.cliff,
            revocable=revocable,
        )
        return schedule.snapshot()

    def is_initialized(self, asset: str = NATIVE_ASSET) -> bool:
        return asset in self._schedules

    def assets(self) -> List[str]:
        """Assets that have a schedule"""
        with self._lock:
            return list(self._schedules)

    def get_vesting_schedule(self, asset: str = NATIVE_ASSET) -> VestingSchedule:
        """Copy of the schedule for `asset`; changing it does not affect the wallet"""
        with self._lock:
            return self._get_schedule(asset).snapshot()

    def _get_schedule(self, asset: str) -> VestingSchedule:
        with self._lock:
            schedule = self._schedules.get(asset)
        if schedule is None:
            raise NotInitialized(f"No vesting schedule for {asset}", asset=asset)
        return schedule

    def released(self, asset: str = NATIVE_ASSET) -> int:
        """Amount already paid out for `asset`"""
        with self._lock:
            schedule = self._schedules.get(asset)
            return schedule.released if schedule else 0

    def releasable(self, asset: str = NATIVE_ASSET) -> int:
        """Vested amount for `asset` that can be released right now"""
        with self._lock:
            schedule = self._schedules.get(asset)
            if schedule is None:
                return 0
            return schedule.releasable_amount(self.clock.now())

    def vested_amount(self, asset: str = NATIVE_ASSET, timestamp: Optional[int] = None) -> int:
        """Amount vested at `timestamp` (defaults to now), released or not"""
        schedule = self._get_schedule(asset)
        if timestamp is None:
            timestamp = self.clock.now()
        return schedule.vested_amount(timestamp)

    def balance(self, asset: str = NATIVE_ASSET) -> int:
        """Funds currently held by the wallet"""
        return self.ledger.balance_of(self.address, asset)

    def release(self, caller: str, asset: str = NATIVE_ASSET) -> int:
        """
        Pay everything vested so far to the beneficiary.

        Only the beneficiary or an authorized caller may trigger a release.
        Raises InsufficientVested when nothing new has vested.

        Returns:
            Amount released
        """
        with self._lock:
            schedule = self._get_schedule(asset)
            if caller != schedule.beneficiary and not self.authorizer.is_authorized(caller):
                raise Unauthorized(f"{caller!r} may not release {asset}", caller=caller, asset=asset)

            now = self.clock.now()
            amount = schedule.releasable_amount(now)
            if amount == 0:
                raise InsufficientVested(f"Nothing vested to release for {asset}", asset=asset)

            snapshot = schedule.snapshot()
            schedule.released += amount
            try:
                self.ledger.transfer(self.address, schedule.beneficiary, amount, asset)
            except Exception:
                schedule.restore(snapshot)
                logger.error("Vesting release failed", asset=asset, amount=amount)
                raise

            self._check_invariants(schedule, now)
            self.event_log.record(
                EventType.RELEASED,
                timestamp=now,
                account=schedule.beneficiary,
                asset=asset,
                amount=amount,
                data={"released": schedule.released, "total_amount": schedule.total_amount},
            )

        return amount

    def revoke(self, caller: str, asset: str = NATIVE_ASSET) -> int:
        """
        Stop vesting for `asset`.

        Whatever has vested is paid to the beneficiary; the unvested rest goes
        back to the caller. Nothing becomes releasable afterwards. Revoking an
        already revoked schedule does nothing.

        Returns:
            Amount refunded
        """
        self.authorizer.require_authorized(caller)

        with self._lock:
            schedule = self._get_schedule(asset)
            if not schedule.revocable:
                raise NotRevocable(f"Vesting for {asset} is not revocable", asset=asset)
            if schedule.revoked:
                logger.info("Vesting already revoked", asset=asset)
                return 0

            now = self.clock.now()
            payout = schedule.releasable_amount(now)
            original_total = schedule.total_amount
            snapshot = schedule.snapshot()

            schedule.released += payout
            schedule.total_amount = schedule.released
            schedule.revoked = True
            refund = original_total - schedule.total_amount

            completed: List[Tuple[str, int]] = []
            try:
                if payout:
                    self.ledger.transfer(self.address, schedule.beneficiary, payout, asset)
                    completed.append((schedule.beneficiary, payout))
                if refund:
                    self.ledger.transfer(self.address, caller, refund, asset)
            except Exception:
                schedule.restore(snapshot)
                for recipient, amount in reversed(completed):
                    self.ledger.transfer(recipient, self.address, amount, asset)
                logger.error("Vesting revoke failed", asset=asset, payout=payout, refund=refund)
                raise

            self._check_invariants(schedule, now)
            if payout:
                self.event_log.record(
                    EventType.RELEASED,
                    timestamp=now,
                    account=schedule.beneficiary,
                    asset=asset,
                    amount=payout,
                    data={"released": schedule.released, "total_amount": schedule.total_amount},
                )
            self.event_log.record(
                EventType.REVOKED,
                timestamp=now,
                account=schedule.beneficiary,
                asset=asset,
                data={"refund": refund, "refunded_to": caller, "original_total": original_total},
            )

        return refund

    def _check_invariants(self, schedule: VestingSchedule, now: int) -> None:
        vested = schedule.vested_amount(now)
        if not 0 <= schedule.released <= vested <= schedule.total_amount:
            raise InvariantViolation(
                "Vesting schedule bookkeeping is inconsistent",
                released=schedule.released,
                vested=vested,
                total_amount=schedule.total_amount,
            )
