"""VestLedger Services

The engines (vesting_wallet, vesting_token) import the models package and are
imported from their own modules.
"""
from .linear_release import accrued, vesting_status, VestingStatus
from .clock import SystemClock, ManualClock
from .authorization import OwnerAuthorizer
from .ledger import InMemoryLedger, NATIVE_ASSET
from .event_log import EventLog, EventType, VestingEvent

__all__ = [
    # Linear release
    "accrued",
    "vesting_status",
    "VestingStatus",
    # Collaborators
    "SystemClock",
    "ManualClock",
    "OwnerAuthorizer",
    "InMemoryLedger",
    "NATIVE_ASSET",
    "EventLog",
    "EventType",
    "VestingEvent",
]
