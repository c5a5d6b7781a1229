"""
Linear Release Function

Maps (amount, start, duration, now) to the quantity accrued so far.

Release is linear between start and start + duration:
1. Before start nothing has accrued
2. At or after start + duration the full amount has accrued
3. In between, amount * elapsed // duration (multiply first, then floor divide)

Truncation always favours the locked side, so a schedule can never pay out more
than it has earned.
"""
from dataclasses import dataclass

from vestledger.exceptions import InvalidConfiguration

# Bounds of the fixed-width types amounts and timestamps are stored in on a ledger
MAX_AMOUNT = 2**256 - 1
MAX_TIMESTAMP = 2**64 - 1


@dataclass(frozen=True)
class VestingStatus:
    """Accrual split of an amount at a point in time"""
    unlocked: int
    locked: int


def check_amount(value: int, name: str = "amount", allow_zero: bool = False) -> int:
    """Validate an asset amount, returning it unchanged"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer", **{name: value})
    if value < 0 or value > MAX_AMOUNT:
        raise InvalidConfiguration(f"{name} out of range", **{name: value})
    if value == 0 and not allow_zero:
        raise InvalidConfiguration(f"{name} must be greater than zero", **{name: value})
    return value


def check_timestamp(value: int, name: str = "timestamp") -> int:
    """Validate a timestamp or duration, returning it unchanged"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer", **{name: value})
    if value < 0 or value > MAX_TIMESTAMP:
        raise InvalidConfiguration(f"{name} out of range", **{name: value})
    return value


def accrued(amount: int, start: int, duration: int, now: int) -> int:
    """
    Calculate the amount accrued by `now` under a linear ramp.

    Args:
        amount: Total amount released over the whole ramp
        start: Timestamp at which accrual begins
        duration: Length of the ramp, must be positive
        now: Timestamp to evaluate at

    Returns:
        Accrued amount, between 0 and `amount` inclusive
    """
    if duration <= 0:
        raise InvalidConfiguration("duration must be greater than zero", duration=duration)

    if now < start:
        return 0
    if now >= start + duration:
        return amount

    return amount * (now - start) // duration


def vesting_status(amount: int, start: int, duration: int, now: int) -> VestingStatus:
    """Split `amount` into its unlocked and still-locked parts at `now`"""
    unlocked = accrued(amount, start, duration, now)
    return VestingStatus(unlocked=unlocked, locked=amount - unlocked)
