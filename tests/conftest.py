"""Pytest configuration and fixtures for VestLedger tests"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport

from vestledger.config import Settings
from vestledger.main import create_app
from vestledger.services.authorization import OwnerAuthorizer
from vestledger.services.clock import ManualClock
from vestledger.services.event_log import EventLog
from vestledger.services.ledger import InMemoryLedger
from vestledger.services.vesting_token import VestingToken
from vestledger.services.vesting_wallet import VestingWallet

# Shared test accounts - test modules repeat these literals where they need them
START = 1_700_000_000
DURATION = 100
OWNER = "owner"
WALLET = "vesting-wallet"
ESCROW = "vesting-escrow"
TOKEN_ASSET = "VEST"


@pytest.fixture
def clock() -> ManualClock:
    """Clock frozen at START until a test advances it"""
    return ManualClock(start=START)


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def authorizer() -> OwnerAuthorizer:
    return OwnerAuthorizer(OWNER)


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def wallet(ledger, authorizer, clock, event_log) -> VestingWallet:
    """Single-schedule vesting wallet with no schedules yet"""
    return VestingWallet(
        address=WALLET,
        ledger=ledger,
        authorizer=authorizer,
        clock=clock,
        event_log=event_log,
    )


@pytest.fixture
def token(ledger, authorizer, clock, event_log) -> VestingToken:
    """Multi-schedule vesting token with a 100 second ramp"""
    return VestingToken(
        ledger=ledger,
        authorizer=authorizer,
        clock=clock,
        duration=DURATION,
        escrow=ESCROW,
        asset=TOKEN_ASSET,
        event_log=event_log,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        owner_address=OWNER,
        wallet_address=WALLET,
        escrow_address=ESCROW,
        token_asset=TOKEN_ASSET,
        vesting_duration_seconds=DURATION,
        debug=False,
    )


@pytest.fixture
def app(settings, clock, ledger):
    return create_app(settings=settings, clock=clock, ledger=ledger)


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
