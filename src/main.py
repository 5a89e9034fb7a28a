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
from src.fx_admin.api.router import router as admin_router
from src.fx_common.database import engine
from src.fx_common.errors import AppError
from src.fx_common.redis_client import close_redis, get_redis
from src.fx_common.response import error_response
from src.fx_exchange.api.router import router as exchange_router
from src.fx_gateway.middleware.request_log import RequestLogMiddleware
from src.fx_ledger.api.router import router as cash_router
from src.fx_rates.api.router import router as rates_router
from src.fx_transfer.api.router import router as transfer_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, probe Redis. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    try:
        redis = await get_redis()
        await redis.ping()
    except Exception:
        # Redis only carries notifications, which are best-effort.
        logger.warning("Redis unreachable at startup; notifications will be dropped", exc_info=True)
    yield
    # Shutdown
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
    resp = error_response(exc.code, exc.message, exc.kind)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(cash_router, prefix="/api/v1")
app.include_router(exchange_router, prefix="/api/v1")
app.include_router(rates_router, prefix="/api/v1")
app.include_router(transfer_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
