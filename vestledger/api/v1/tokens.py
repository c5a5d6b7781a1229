"""Vesting token API endpoints"""
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from vestledger.api.deps import get_caller, get_vesting_token
from vestledger.schemas.token import (
    BalanceResponse,
    BurnRequest,
    MintRequest,
    TokenRevokeResponse,
    TotalVestingResponse,
    TransferRequest,
    UserVestingScheduleResponse,
    VestingStatusResponse,
    VestRequest,
    VestResponse,
    WithdrawResponse,
)
from vestledger.services.vesting_token import VestingToken

router = APIRouter()


def _balance_response(token: VestingToken, account: str) -> BalanceResponse:
    return BalanceResponse(
        account=account,
        balance=token.balance_of(account),
        spendable=token.spendable_balance_of(account),
        vesting_balance=token.vesting_balance_of(account),
    )


@router.post("/mint", response_model=BalanceResponse)
async def mint_tokens(
    request: MintRequest,
    caller: str = Depends(get_caller),
    token: VestingToken = Depends(get_vesting_token),
):
    """Mint tokens to an account (owner only)"""
    token.mint(caller, request.account, request.amount)
    return _balance_response(token, request.account)


@router.post("/burn", response_model=BalanceResponse)
async def burn_tokens(
    request: BurnRequest,
    caller: str = Depends(get_caller),
    token: VestingToken = Depends(get_vesting_token),
):
    """Burn spendable tokens of an account (owner only)"""
    token.burn(caller, request.account, request.amount)
    return _balance_response(token, request.account)


@router.post("/transfer", response_model=BalanceResponse)
async def transfer_tokens(
    request: TransferRequest,
    caller: str = Depends(get_caller),
    token: VestingToken = Depends(get_vesting_token),
):
    """Transfer spendable tokens from the caller"""
    token.transfer(caller, request.recipient, request.amount)
    return _balance_response(token, caller)


@router.get("/balance/{account}", response_model=BalanceResponse)
async def get_balance(
    account: str = Path(...),
    token: VestingToken = Depends(get_vesting_token),
):
    """Get nominal, spendable and locked balance of an account"""
    return _balance_response(token, account)


@router.post("/vest", response_model=VestResponse, status_code=201)
async def vest_tokens(
    request: VestRequest,
    caller: str = Depends(get_caller),
    token: VestingToken = Depends(get_vesting_token),
):
    """Lock part of the caller's balance into a new schedule starting now"""
    index = token.vest(caller, request.amount)
    return VestResponse(
        account=caller,
        index=index,
        amount=request.amount,
        vesting_length=token.get_vesting_length(caller),
    )


@router.get("/schedules/{account}", response_model=List[UserVestingScheduleResponse])
async def list_vesting_schedules(
    account: str = Path(...),
    token: VestingToken = Depends(get_vesting_token),
):
    """List all vesting schedules of an account"""
    return [
        UserVestingScheduleResponse(index=index, **token.get_user_vesting_schedule(account, index)._asdict())
        for index in range(token.get_vesting_length(account))
    ]


@router.get("/schedules/{account}/{index}", response_model=UserVestingScheduleResponse)
async def get_vesting_schedule(
    account: str = Path(...),
    index: int = Path(...),
    token: VestingToken = Depends(get_vesting_token),
):
    """Get one vesting schedule of an account"""
    schedule = token.get_user_vesting_schedule(account, index)
    return UserVestingScheduleResponse(index=index, **schedule._asdict())


@router.post("/schedules/{account}/{index}/withdraw", response_model=WithdrawResponse)
async def withdraw_vested(
    account: str = Path(...),
    index: int = Path(...),
    token: VestingToken = Depends(get_vesting_token),
):
    """Withdraw the unlocked part of a schedule to its account"""
    result = token.withdraw(account, index)
    return WithdrawResponse(
        unlocked_amount=result.unlocked_amount,
        locked_amount=result.locked_amount,
        vesting_length=token.get_vesting_length(account),
    )


@router.post("/schedules/{account}/{index}/revoke", response_model=TokenRevokeResponse)
async def revoke_schedule(
    account: str = Path(...),
    index: int = Path(...),
    caller: str = Depends(get_caller),
    token: VestingToken = Depends(get_vesting_token),
):
    """Terminate a schedule early (owner only)"""
    result = token.revoke(caller, account, index)
    return TokenRevokeResponse(
        paid_amount=result.paid_amount,
        refunded_amount=result.refunded_amount,
        vesting_length=token.get_vesting_length(account),
    )


@router.get("/status", response_model=VestingStatusResponse)
async def get_vesting_status(
    amount: int = Query(...),
    start: int = Query(...),
    token: VestingToken = Depends(get_vesting_token),
):
    """Preview the unlocked/locked split of a schedule without storing it"""
    status = token.vesting_status(amount, start)
    return VestingStatusResponse(
        amount=amount,
        start=start,
        duration=token.duration,
        unlocked=status.unlocked,
        locked=status.locked,
    )


@router.get("/total", response_model=TotalVestingResponse)
async def get_total_vesting(token: VestingToken = Depends(get_vesting_token)):
    """Get the amount locked across all accounts"""
    return TotalVestingResponse(total_vesting_balance=token.total_vesting_balance)
