"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.dg_admin.api.router import router as admin_router
from src.dg_common.database import engine
from src.dg_common.errors import AppError
from src.dg_common.redis_client import close_redis, get_redis
from src.dg_common.response import error_response
from src.dg_fees.application.scheduler import FeeUpdateScheduler
from src.dg_gateway.middleware.request_log import RequestLogMiddleware
from src.dg_ledger.infrastructure.solana_gateway import close_ledger_gateway
from src.dg_mirror.api.router import router as sync_router
from src.dg_oracle.infrastructure.client import close_oracle_client
from src.dg_resolution.application.scheduler import ResolutionScheduler
from src.dg_settlement.api.router import router as settlement_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, start the schedulers. Shutdown: reverse."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    scheduler = ResolutionScheduler()
    if settings.RESOLUTION_SCHEDULER_ENABLED:
        scheduler.start()
    app.state.scheduler = scheduler
    fee_scheduler = FeeUpdateScheduler()
    if settings.FEE_UPDATER_ENABLED:
        fee_scheduler.start()
    app.state.fee_scheduler = fee_scheduler
    yield
    # Shutdown
    await fee_scheduler.stop()
    await scheduler.stop()
    await close_oracle_client()
    await close_ledger_gateway()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(sync_router, prefix="/api/v1")
app.include_router(settlement_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
