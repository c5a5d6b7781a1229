"""
Multi-schedule vesting token.

A balance-bearing account type where any holder can lock part of their own
balance into independent linear schedules and later withdraw each schedule's
unlocked portion.

Locked funds sit in an escrow account on the underlying ledger. A holder's
nominal balance is their ledger balance plus everything still locked for them,
so locking carves value out of the spendable balance instead of adding to it.

Schedules are addressed by position. Withdrawing the last of a schedule removes
it by moving the final schedule into its slot, so callers must re-read
`get_vesting_length` after every withdrawal.
"""
import threading
from typing import Dict, List, NamedTuple, Optional, Tuple

import structlog

from vestledger.exceptions import (
    InsufficientBalance,
    InvalidConfiguration,
    InvalidIndex,
    InvariantViolation,
    Unauthorized,
)
from vestledger.models.vesting import AccountVestingRecord, VestingSchedule
from vestledger.services.authorization import Authorizer
from vestledger.services.clock import Clock
from vestledger.services.event_log import EventLog, EventType
from vestledger.services.ledger import AssetLedger
from vestledger.services.linear_release import (
    VestingStatus,
    check_amount,
    check_timestamp,
    vesting_status,
)

logger = structlog.get_logger()


class UserVestingSchedule(NamedTuple):
    """Read-only projection of one schedule"""
    total_amount: int
    start: int
    unlocked: int
    locked: int


class WithdrawResult(NamedTuple):
    unlocked_amount: int
    locked_amount: int


class RevokeResult(NamedTuple):
    paid_amount: int
    refunded_amount: int


class VestingToken:
    """Ledger of per-account linear vesting schedules over one asset."""

    def __init__(
        self,
        ledger: AssetLedger,
        authorizer: Authorizer,
        clock: Clock,
        duration: int,
        escrow: str,
        asset: str,
        event_log: Optional[EventLog] = None,
    ):
        """
        Initialize the vesting token.

        Args:
            ledger: Ledger holding balances of `asset`
            authorizer: Gate for admin-only operations
            clock: Source of the current timestamp
            duration: Ramp length applied to every schedule
            escrow: Ledger account locked funds are held in
            asset: Asset the token tracks
            event_log: Where Released/Revoked events are recorded
        """
        check_timestamp(duration, "duration")
        if duration == 0:
            raise InvalidConfiguration("duration must be greater than zero", duration=duration)
        if not escrow:
            raise InvalidConfiguration("escrow account cannot be empty")

        self.ledger = ledger
        self.authorizer = authorizer
        self.clock = clock
        self.duration = duration
        self.escrow = escrow
        self.asset = asset
        self.event_log = event_log if event_log is not None else EventLog()

        self._records: Dict[str, AccountVestingRecord] = {}
        self._total_vesting_balance = 0
        self._account_locks: Dict[str, threading.RLock] = {}
        # Guards the record/lock tables and the aggregate counter.
        # Always taken after an account lock, never before.
        self._lock = threading.RLock()

    # -- balances -----------------------------------------------------------

    @property
    def total_vesting_balance(self) -> int:
        with self._lock:
            return self._total_vesting_balance

    def vesting_balance_of(self, account: str) -> int:
        """Amount still locked across all of `account`'s schedules"""
        with self._lock:
            record = self._records.get(account)
            return record.locked_total if record else 0

    def balance_of(self, account: str) -> int:
        """Nominal balance, locked funds included"""
        return self.ledger.balance_of(account, self.asset) + self.vesting_balance_of(account)

    def spendable_balance_of(self, account: str) -> int:
        return self.balance_of(account) - self.vesting_balance_of(account)

    def mint(self, caller: str, account: str, amount: int) -> None:
        self.authorizer.require_authorized(caller)
        self._reject_escrow(account, "mint to")
        self.ledger.mint(account, amount, self.asset)
        logger.info("Tokens minted", account=account, amount=amount, asset=self.asset)

    def burn(self, caller: str, account: str, amount: int) -> None:
        self.authorizer.require_authorized(caller)
        self._reject_escrow(account, "burn from")
        check_amount(amount)
        with self._account_lock(account):
            self._require_spendable(account, amount)
            self.ledger.burn(account, amount, self.asset)
        logger.info("Tokens burned", account=account, amount=amount, asset=self.asset)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move spendable funds; locked funds cannot be transferred"""
        self._reject_escrow(sender, "transfer from")
        check_amount(amount)
        with self._account_lock(sender):
            self._require_spendable(sender, amount)
            self.ledger.transfer(sender, recipient, amount, self.asset)
        logger.debug("Tokens transferred", sender=sender, recipient=recipient, amount=amount)

    # -- schedules ----------------------------------------------------------

    def vest(self, caller: str, amount: int) -> int:
        """
        Lock `amount` of the caller's spendable balance into a new schedule
        starting now.

        Returns:
            Index of the new schedule
        """
        self._reject_escrow(caller, "vest from")
        check_amount(amount)

        with self._account_lock(caller):
            self._require_spendable(caller, amount)

            now = self.clock.now()
            schedule = VestingSchedule.create(
                beneficiary=caller,
                total_amount=amount,
                start=now,
                duration=self.duration,
            )

            self.ledger.transfer(caller, self.escrow, amount, self.asset)

            with self._lock:
                record = self._records.setdefault(caller, AccountVestingRecord(account=caller))
                index = record.append(schedule)
                self._total_vesting_balance += amount

            self._check_invariants(caller, now)

        logger.info(
            "Vesting schedule created",
            account=caller,
            index=index,
            amount=amount,
            start=now,
            duration=self.duration,
        )
        return index

    def get_vesting_length(self, account: str) -> int:
        with self._lock:
            record = self._records.get(account)
            return len(record) if record else 0

    def get_user_vesting_schedule(self, account: str, index: int) -> UserVestingSchedule:
        """Total, start, and the unlocked/locked split of one schedule right now"""
        with self._account_lock(account):
            schedule = self._get_record(account, index).get(index)
            now = self.clock.now()
            unlocked = schedule.vested_amount(now)
            return UserVestingSchedule(
                total_amount=schedule.total_amount,
                start=schedule.start,
                unlocked=unlocked,
                locked=schedule.total_amount - unlocked,
            )

    def get_user_vesting_schedules(self, account: str) -> List[VestingSchedule]:
        """Copies of all schedules for `account`, in index order"""
        with self._account_lock(account):
            with self._lock:
                record = self._records.get(account)
                return [s.snapshot() for s in record.schedules] if record else []

    def vesting_status(self, amount: int, start: int) -> VestingStatus:
        """Preview how a schedule of `amount` started at `start` stands now"""
        check_amount(amount)
        check_timestamp(start, "start")
        return vesting_status(amount, start, self.duration, self.clock.now())

    def withdraw(self, account: str, index: int) -> WithdrawResult:
        """
        Pay out the unlocked part of one schedule to `account`.

        Withdrawing with nothing unlocked succeeds without changing anything.
        A schedule that ends up fully paid is removed.

        Returns:
            Amount paid and amount still locked in the schedule
        """
        with self._account_lock(account):
            record = self._get_record(account, index)
            schedule = record.get(index)

            now = self.clock.now()
            unlocked = schedule.releasable_amount(now)
            if unlocked == 0:
                return WithdrawResult(unlocked_amount=0, locked_amount=schedule.locked_amount)

            snapshot = record.snapshot()
            schedule.released += unlocked
            record.locked_total -= unlocked
            removed = schedule.is_exhausted
            if removed:
                record.remove(index)
            with self._lock:
                self._total_vesting_balance -= unlocked

            try:
                self.ledger.transfer(self.escrow, account, unlocked, self.asset)
            except Exception:
                self._rollback(record, snapshot, unlocked)
                logger.error("Vesting withdrawal failed", account=account, index=index, amount=unlocked)
                raise

            locked = 0 if removed else schedule.locked_amount
            self._check_invariants(account, now)
            self.event_log.record(
                EventType.RELEASED,
                timestamp=now,
                account=account,
                asset=self.asset,
                amount=unlocked,
                data={"index": index, "locked": locked, "removed": removed},
            )

        return WithdrawResult(unlocked_amount=unlocked, locked_amount=locked)

    def revoke(self, caller: str, account: str, index: int) -> RevokeResult:
        """
        Terminate one schedule early.

        The unlocked part goes to `account`, the still-locked part is refunded
        to the caller, and the schedule is removed.

        Returns:
            Amount paid to the holder and amount refunded
        """
        self.authorizer.require_authorized(caller)

        with self._account_lock(account):
            record = self._get_record(account, index)
            schedule = record.get(index)

            now = self.clock.now()
            paid = schedule.releasable_amount(now)
            remaining = schedule.locked_amount
            refund = remaining - paid

            snapshot = record.snapshot()
            schedule.released += paid
            schedule.total_amount = schedule.released
            schedule.revoked = True
            record.locked_total -= remaining
            record.remove(index)
            with self._lock:
                self._total_vesting_balance -= remaining

            completed: List[Tuple[str, int]] = []
            try:
                if paid:
                    self.ledger.transfer(self.escrow, account, paid, self.asset)
                    completed.append((account, paid))
                if refund:
                    self.ledger.transfer(self.escrow, caller, refund, self.asset)
            except Exception:
                for recipient, amount in reversed(completed):
                    self.ledger.transfer(recipient, self.escrow, amount, self.asset)
                self._rollback(record, snapshot, remaining)
                logger.error("Vesting revoke failed", account=account, index=index)
                raise

            self._check_invariants(account, now)
            if paid:
                self.event_log.record(
                    EventType.RELEASED,
                    timestamp=now,
                    account=account,
                    asset=self.asset,
                    amount=paid,
                    data={"index": index, "locked": 0, "removed": True},
                )
            self.event_log.record(
                EventType.REVOKED,
                timestamp=now,
                account=account,
                asset=self.asset,
                data={"index": index, "refund": refund, "refunded_to": caller},
            )

        return RevokeResult(paid_amount=paid, refunded_amount=refund)

    # -- internals ----------------------------------------------------------

    def _account_lock(self, account: str) -> threading.RLock:
        with self._lock:
            return self._account_locks.setdefault(account, threading.RLock())

    def _reject_escrow(self, account: str, action: str) -> None:
        # Escrow holds every account's locked funds and only moves them via withdraw/revoke.
        if account == self.escrow:
            raise Unauthorized(f"Cannot {action} the escrow account", account=account)

    def _get_record(self, account: str, index: int) -> AccountVestingRecord:
        with self._lock:
            record = self._records.get(account)
        if record is None:
            raise InvalidIndex(
                f"No vesting schedule at index {index} for {account}", account=account, index=index
            )
        return record

    def _require_spendable(self, account: str, amount: int) -> None:
        spendable = self.spendable_balance_of(account)
        if amount > spendable:
            raise InsufficientBalance(
                f"Amount exceeds spendable balance of {account}",
                account=account,
                amount=amount,
                spendable=spendable,
            )

    def _rollback(self, record: AccountVestingRecord, snapshot: AccountVestingRecord, amount: int) -> None:
        record.restore(snapshot)
        with self._lock:
            self._total_vesting_balance += amount

    def _check_invariants(self, account: str, now: int) -> None:
        with self._lock:
            record = self._records.get(account)
            if record is not None:
                for schedule in record.schedules:
                    vested = schedule.vested_amount(now)
                    if not 0 <= schedule.released <= vested <= schedule.total_amount:
                        raise InvariantViolation(
                            "Vesting schedule bookkeeping is inconsistent",
                            account=account,
                            released=schedule.released,
                            vested=vested,
                            total_amount=schedule.total_amount,
                        )
                if record.locked_total != record.computed_locked_total():
                    raise InvariantViolation(
                        "Locked total does not match schedules",
                        account=account,
                        locked_total=record.locked_total,
                    )

            total = sum(r.locked_total for r in self._records.values())
            if total != self._total_vesting_balance:
                raise InvariantViolation(
                    "Total vesting balance does not match accounts",
                    total_vesting_balance=self._total_vesting_balance,
                    computed=total,
                )
