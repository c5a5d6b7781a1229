"""VestLedger API - Main Application"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vestledger.api.v1.router import api_router
from vestledger.config import Settings, get_settings
from vestledger.exceptions import VestingError
from vestledger.services.authorization import OwnerAuthorizer
from vestledger.services.clock import Clock, SystemClock
from vestledger.services.event_log import EventLog
from vestledger.services.ledger import AssetLedger, InMemoryLedger
from vestledger.services.vesting_token import VestingToken
from vestledger.services.vesting_wallet import VestingWallet

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = app.state.settings
    logger.info(
        "Starting VestLedger API",
        version=settings.app_version,
        owner=settings.owner_address,
        vesting_duration_seconds=settings.vesting_duration_seconds,
    )

    yield

    logger.info(
        "VestLedger API shutdown complete",
        events_recorded=len(app.state.event_log),
        total_vesting_balance=app.state.vesting_token.total_vesting_balance,
    )


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    ledger: Optional[AssetLedger] = None,
) -> FastAPI:
    """Create FastAPI application with its vesting engines"""
    settings = settings or get_settings()
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    clock = clock or SystemClock()
    ledger = ledger or InMemoryLedger()
    authorizer = OwnerAuthorizer(settings.owner_address)
    event_log = EventLog()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API for linear vesting wallets and vesting token schedules",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.clock = clock
    app.state.ledger = ledger
    app.state.event_log = event_log
    app.state.vesting_wallet = VestingWallet(
        address=settings.wallet_address,
        ledger=ledger,
        authorizer=authorizer,
        clock=clock,
        event_log=event_log,
    )
    app.state.vesting_token = VestingToken(
        ledger=ledger,
        authorizer=authorizer,
        clock=clock,
        duration=settings.vesting_duration_seconds,
        escrow=settings.escrow_address,
        asset=settings.token_asset,
        event_log=event_log,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(VestingError)
    async def vesting_error_handler(request: Request, exc: VestingError):
        """Report engine errors with the status code they carry"""
        logger.warning(
            "Vesting request rejected",
            path=request.url.path,
            error=exc.__class__.__name__,
            detail=str(exc),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc), "error": exc.__class__.__name__},
        )

    # Include routers
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "time": clock.now(),
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "vestledger.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
