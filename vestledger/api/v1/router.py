"""API v1 router aggregation"""
from fastapi import APIRouter

from vestledger.api.v1 import events, tokens, vesting

api_router = APIRouter()

api_router.include_router(vesting.router, prefix="/wallet", tags=["Vesting Wallet"])
api_router.include_router(tokens.router, prefix="/token", tags=["Vesting Token"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
