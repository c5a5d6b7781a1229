"""Event log for vesting payouts and revocations."""
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import structlog

logger = structlog.get_logger()


class EventType(str, Enum):
    """Kinds of events emitted by the vesting engines"""
    RELEASED = "released"
    REVOKED = "revoked"


@dataclass
class VestingEvent:
    """A single emitted event"""
    event_type: EventType
    timestamp: int
    account: str
    asset: str
    amount: int = 0
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp,
            "account": self.account,
            "asset": self.asset,
            "amount": self.amount,
            "data": self.data,
        }


class EventLog:
    """Append-only record of emitted events with optional subscribers."""

    def __init__(self):
        self._events: List[VestingEvent] = []
        self._subscribers: List[Callable[[VestingEvent], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[VestingEvent], None]) -> None:
        self._subscribers.append(callback)

    def record(
        self,
        event_type: EventType,
        timestamp: int,
        account: str,
        asset: str,
        amount: int = 0,
        data: Optional[Dict[str, Any]] = None,
    ) -> VestingEvent:
        """
        Record an event and notify subscribers.

        A subscriber that raises is logged and skipped; the event stays
        recorded and the remaining subscribers are still called.

        Args:
            event_type: The type of event
            timestamp: Time the emitting operation ran at
            account: Beneficiary or holder the event concerns
            asset: Asset the event concerns
            amount: Amount paid out (0 for events without a payout)
            data: Additional event-specific data

        Returns:
            The recorded VestingEvent
        """
        event = VestingEvent(
            event_type=event_type,
            timestamp=timestamp,
            account=account,
            asset=asset,
            amount=amount,
            data=data or {},
        )
        with self._lock:
            self._events.append(event)

        logger.info(
            "Vesting event recorded",
            event_type=event_type.value,
            account=account,
            asset=asset,
            amount=amount,
        )

        # The emitting operation has already committed; a subscriber cannot undo it.
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Event subscriber failed",
                    event_type=event_type.value,
                    account=account,
                    subscriber=getattr(callback, "__name__", repr(callback)),
                )

        return event

    def events(self, event_type: Optional[EventType] = None) -> List[VestingEvent]:
        with self._lock:
            if event_type is None:
                return list(self._events)
            return [e for e in self._events if e.event_type == event_type]

    def __len__(self) -> int:
        return len(self._events)
