"""Vesting event API endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from vestledger.api.deps import get_event_log
from vestledger.schemas.vesting import VestingEventResponse
from vestledger.services.event_log import EventLog, EventType

router = APIRouter()


@router.get("", response_model=List[VestingEventResponse])
async def list_events(
    event_type: Optional[EventType] = Query(None),
    account: Optional[str] = Query(None),
    event_log: EventLog = Depends(get_event_log),
):
    """List recorded Released/Revoked events, oldest first"""
    events = event_log.events(event_type)
    if account:
        events = [e for e in events if e.account == account]
    return [VestingEventResponse(**e.to_dict()) for e in events]
