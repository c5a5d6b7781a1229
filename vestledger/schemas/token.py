"""Vesting token schemas"""
from pydantic import BaseModel


class MintRequest(BaseModel):
    account: str
    amount: int


class BurnRequest(BaseModel):
    account: str
    amount: int


class TransferRequest(BaseModel):
    """Transfer spendable tokens from the caller"""
    recipient: str
    amount: int


class BalanceResponse(BaseModel):
    account: str
    balance: int  # Nominal balance including locked tokens
    spendable: int
    vesting_balance: int


class VestRequest(BaseModel):
    amount: int


class VestResponse(BaseModel):
    account: str
    index: int
    amount: int
    vesting_length: int


class UserVestingScheduleResponse(BaseModel):
    index: int
    total_amount: int
    start: int
    unlocked: int
    locked: int


class WithdrawResponse(BaseModel):
    unlocked_amount: int
    locked_amount: int
    vesting_length: int  # Indices may have shifted if a schedule was removed


class TokenRevokeResponse(BaseModel):
    paid_amount: int
    refunded_amount: int
    vesting_length: int


class VestingStatusResponse(BaseModel):
    amount: int
    start: int
    duration: int
    unlocked: int
    locked: int


class TotalVestingResponse(BaseModel):
    total_vesting_balance: int
