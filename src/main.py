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
from src.tm_common.database import engine
from src.tm_common.datetime_utils import to_millis, utc_now
from src.tm_common.errors import AppError
from src.tm_common.redis_client import close_redis, ping_redis
from src.tm_common.response import ApiResponse, error_response, success_response
from src.tm_events.api.router import router as events_router
from src.tm_gateway.middleware.request_log import RequestLogMiddleware
from src.tm_match.api.router import history_router
from src.tm_match.api.router import router as match_router
from src.tm_notify.api.router import router as devices_router
from src.tm_notify.application.service import close_notification_service
from src.tm_queue.api.router import router as queue_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await ping_redis()
    yield
    # Shutdown
    await close_notification_service()
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
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(queue_router, prefix="/api/v1")
app.include_router(match_router, prefix="/api/v1")
app.include_router(history_router, prefix="/api/v1")
app.include_router(devices_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")


@app.get("/api/v1/time")
async def server_time(request: Request) -> ApiResponse:
    """Server clock for client countdowns against match start_at."""
    return success_response({"timestamp_millis": to_millis(utc_now())}, request)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
