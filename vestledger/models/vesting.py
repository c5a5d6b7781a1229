"""Vesting schedule models"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from vestledger.exceptions import InvalidConfiguration, InvalidIndex
from vestledger.services.linear_release import accrued, check_amount, check_timestamp


class VestingState(str, Enum):
    """Vesting schedule status"""
    PENDING = "pending"      # before start or cliff
    ACTIVE = "active"
    COMPLETED = "completed"  # everything released
    REVOKED = "revoked"


@dataclass
class VestingSchedule:
    """One linear vesting grant.

    Tokens accrue linearly from `start` over `duration`. Nothing is releasable
    before `cliff`, which is an independent gate: both the cliff and the start
    must have passed. `released` only ever grows and never exceeds
    `total_amount`.
    """
    beneficiary: str
    total_amount: int
    start: int
    duration: int
    cliff: int
    released: int = 0
    revocable: bool = False
    revoked: bool = False

    @classmethod
    def create(
        cls,
        beneficiary: str,
        total_amount: int,
        start: int,
        duration: int,
        cliff: Optional[int] = None,
        revocable: bool = False,
    ) -> "VestingSchedule":
        """Validate parameters and build a fresh schedule"""
        if not beneficiary:
            raise InvalidConfiguration("beneficiary cannot be empty")
        check_amount(total_amount, "total_amount")
        check_timestamp(start, "start")
        check_timestamp(duration, "duration")
        if duration == 0:
            raise InvalidConfiguration("duration must be greater than zero", duration=duration)
        if cliff is None:
            cliff = start
        check_timestamp(cliff, "cliff")

        return cls(
            beneficiary=beneficiary,
            total_amount=total_amount,
            start=start,
            duration=duration,
            cliff=cliff,
            revocable=revocable,
        )

    @property
    def end(self) -> int:
        return self.start + self.duration

    @property
    def locked_amount(self) -> int:
        """Amount not yet paid out under this schedule"""
        return self.total_amount - self.released

    @property
    def is_exhausted(self) -> bool:
        return self.released == self.total_amount

    def vested_amount(self, now: int) -> int:
        """Calculate the amount vested at `now`, released or not"""
        if self.revoked:
            return self.total_amount
        if now < self.cliff:
            return 0
        return accrued(self.total_amount, self.start, self.duration, now)

    def releasable_amount(self, now: int) -> int:
        """Vested amount that has not been released yet"""
        return self.vested_amount(now) - self.released

    def status(self, now: int) -> VestingState:
        if self.revoked:
            return VestingState.REVOKED
        if self.is_exhausted:
            return VestingState.COMPLETED
        if now < self.start or now < self.cliff:
            return VestingState.PENDING
        return VestingState.ACTIVE

    def snapshot(self) -> "VestingSchedule":
        """Copy of the current state, used to roll back a failed operation"""
        return replace(self)

    def restore(self, snapshot: "VestingSchedule") -> None:
        self.total_amount = snapshot.total_amount
        self.released = snapshot.released
        self.revoked = snapshot.revoked

    def to_dict(self, now: Optional[int] = None) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        data = {
            "beneficiary": self.beneficiary,
            "total_amount": self.total_amount,
            "start": self.start,
            "duration": self.duration,
            "cliff": self.cliff,
            "released": self.released,
            "revocable": self.revocable,
            "revoked": self.revoked,
        }
        if now is not None:
            data["vested"] = self.vested_amount(now)
            data["releasable"] = self.releasable_amount(now)
            data["status"] = self.status(now).value
        return data

    def __repr__(self):
        return f"<VestingSchedule {self.beneficiary[:8]} ({self.released}/{self.total_amount} released)>"


@dataclass
class AccountVestingRecord:
    """Ordered schedules belonging to one account.

    Indices are positions in `schedules`. Removing a schedule moves the last
    one into its slot, so an index is only valid until the next removal.
    """
    account: str
    schedules: List[VestingSchedule] = field(default_factory=list)
    locked_total: int = 0

    def __len__(self) -> int:
        return len(self.schedules)

    def get(self, index: int) -> VestingSchedule:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.schedules):
            raise InvalidIndex(
                f"No vesting schedule at index {index} for {self.account}",
                account=self.account,
                index=index,
            )
        return self.schedules[index]

    def append(self, schedule: VestingSchedule) -> int:
        """Add a schedule, returning its index"""
        index = len(self.schedules)
        self.schedules.append(schedule)
        self.locked_total += schedule.locked_amount
        return index

    def remove(self, index: int) -> VestingSchedule:
        """Swap-and-pop the schedule at `index`"""
        schedule = self.get(index)
        last = self.schedules.pop()
        if index < len(self.schedules):
            self.schedules[index] = last
        return schedule

    def computed_locked_total(self) -> int:
        return sum(s.locked_amount for s in self.schedules)

    def snapshot(self) -> "AccountVestingRecord":
        return AccountVestingRecord(
            account=self.account,
            schedules=[s.snapshot() for s in self.schedules],
            locked_total=self.locked_total,
        )

    def restore(self, snapshot: "AccountVestingRecord") -> None:
        self.schedules = [s.snapshot() for s in snapshot.schedules]
        self.locked_total = snapshot.locked_total
