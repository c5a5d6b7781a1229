"""Request dependencies"""
from fastapi import Header, Request

from vestledger.services.event_log import EventLog
from vestledger.services.vesting_token import VestingToken
from vestledger.services.vesting_wallet import VestingWallet


async def get_caller(x_caller: str = Header(...)) -> str:
    """Identity of the account performing the request"""
    return x_caller


def get_vesting_wallet(request: Request) -> VestingWallet:
    return request.app.state.vesting_wallet


def get_vesting_token(request: Request) -> VestingToken:
    return request.app.state.vesting_token


def get_event_log(request: Request) -> EventLog:
    return request.app.state.event_log
