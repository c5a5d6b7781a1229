"""Vesting models"""
from vestledger.models.vesting import AccountVestingRecord, VestingSchedule, VestingState

__all__ = [
    "AccountVestingRecord",
    "VestingSchedule",
    "VestingState",
]
