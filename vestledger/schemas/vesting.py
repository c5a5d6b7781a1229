"""Vesting wallet schemas"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class InitializeVestingRequest(BaseModel):
    """Create the vesting schedule for one asset of the wallet.

    Accrual is linear from `start` over `duration` seconds. Nothing releases
    before `cliff` (defaults to `start`).
    """
    beneficiary: str
    total_amount: int
    start: int  # Unix timestamp
    duration: int  # seconds
    cliff: Optional[int] = None  # Unix timestamp
    revocable: bool = True


class VestingScheduleResponse(BaseModel):
    asset: str
    beneficiary: str
    total_amount: int
    start: int
    duration: int
    cliff: int
    released: int
    vested: int
    releasable: int
    revocable: bool
    revoked: bool
    status: str


class ReleasableResponse(BaseModel):
    asset: str
    releasable: int
    released: int
    balance: int  # Funds currently held by the wallet


class ReleaseResponse(BaseModel):
    asset: str
    amount: int
    released: int


class RevokeResponse(BaseModel):
    asset: str
    refund: int
    released: int


class VestingEventResponse(BaseModel):
    event_type: str
    timestamp: int
    account: str
    asset: str
    amount: int
    data: Dict[str, Any] = {}


class WalletAssetsResponse(BaseModel):
    address: str
    assets: List[str]
