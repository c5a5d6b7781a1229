"""Vesting wallet API endpoints"""
from fastapi import APIRouter, Depends, Path

from vestledger.api.deps import get_caller, get_vesting_wallet
from vestledger.schemas.vesting import (
    InitializeVestingRequest,
    ReleasableResponse,
    ReleaseResponse,
    RevokeResponse,
    VestingScheduleResponse,
    WalletAssetsResponse,
)
from vestledger.services.vesting_wallet import VestingWallet

router = APIRouter()


def _schedule_to_response(wallet: VestingWallet, asset: str) -> VestingScheduleResponse:
    schedule = wallet.get_vesting_schedule(asset)
    return VestingScheduleResponse(asset=asset, **schedule.to_dict(now=wallet.clock.now()))


@router.get("", response_model=WalletAssetsResponse)
async def list_vesting_assets(wallet: VestingWallet = Depends(get_vesting_wallet)):
    """List assets that have a vesting schedule"""
    return WalletAssetsResponse(address=wallet.address, assets=wallet.assets())


@router.get("/{asset}/schedule", response_model=VestingScheduleResponse)
async def get_vesting_schedule(
    asset: str = Path(...),
    wallet: VestingWallet = Depends(get_vesting_wallet),
):
    """Get the vesting schedule of an asset"""
    return _schedule_to_response(wallet, asset)


@router.get("/{asset}/releasable", response_model=ReleasableResponse)
async def get_releasable(
    asset: str = Path(...),
    wallet: VestingWallet = Depends(get_vesting_wallet),
):
    """Get the amount that can be released right now"""
    return ReleasableResponse(
        asset=asset,
        releasable=wallet.releasable(asset),
        released=wallet.released(asset),
        balance=wallet.balance(asset),
    )


@router.post("/{asset}/initialize", response_model=VestingScheduleResponse, status_code=201)
async def initialize_vesting(
    request: InitializeVestingRequest,
    asset: str = Path(...),
    caller: str = Depends(get_caller),
    wallet: VestingWallet = Depends(get_vesting_wallet),
):
    """Create the vesting schedule of an asset (owner only, once per asset)"""
    wallet.initialize(
        caller,
        beneficiary=request.beneficiary,
        total_amount=request.total_amount,
        start=request.start,
        duration=request.duration,
        cliff=request.cliff,
        revocable=request.revocable,
        asset=asset,
    )
    return _schedule_to_response(wallet, asset)


@router.post("/{asset}/release", response_model=ReleaseResponse)
async def release_vested(
    asset: str = Path(...),
    caller: str = Depends(get_caller),
    wallet: VestingWallet = Depends(get_vesting_wallet),
):
    """Release vested funds to the beneficiary"""
    amount = wallet.release(caller, asset)
    return ReleaseResponse(asset=asset, amount=amount, released=wallet.released(asset))


@router.post("/{asset}/revoke", response_model=RevokeResponse)
async def revoke_vesting(
    asset: str = Path(...),
    caller: str = Depends(get_caller),
    wallet: VestingWallet = Depends(get_vesting_wallet),
):
    """Revoke vesting, paying out what has vested and refunding the rest (owner only)"""
    refund = wallet.revoke(caller, asset)
    return RevokeResponse(asset=asset, refund=refund, released=wallet.released(asset))
