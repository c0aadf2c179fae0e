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
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.rs_common.database import engine, ping_database
from src.rs_common.errors import AppError
from src.rs_common.redis_client import close_redis, ping_redis
from src.rs_common.response import error_response
from src.rs_driver.api.router import router as driver_router
from src.rs_gateway.api.router import router as auth_router
from src.rs_gateway.middleware.request_log import RequestLogMiddleware
from src.rs_moderation.api.router import router as moderation_router
from src.rs_pricing.api.router import router as pricing_router
from src.rs_settlement.api.router import router as settlement_router
from src.rs_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_INVALID_REQUEST_CODE = 3001


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: PostgreSQL must answer, Redis is optional. Shutdown: dispose."""
    await ping_database()
    cache_ok = await ping_redis()
    logger.info(
        "%s started (timezone=%s, currency=%s, config cache=%s)",
        settings.APP_NAME,
        settings.PRICING_TIMEZONE,
        settings.DEFAULT_CURRENCY,
        "on" if cache_ok else "off",
    )
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, _request_id(request))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Invalid input"
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "invalid value")
        message = f"Invalid input: {field}: {detail}" if field else f"Invalid input: {detail}"
    resp = error_response(_INVALID_REQUEST_CODE, message, _request_id(request))
    return JSONResponse(status_code=422, content=resp.model_dump())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(pricing_router, prefix="/api/v1")
app.include_router(driver_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(settlement_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
