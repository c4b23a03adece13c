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
from sqlalchemy import text

from config.settings import settings
from src.rp_admin.api.router import router as admin_router
from src.rp_common.database import dispose_engine, get_engine, get_session_factory
from src.rp_common.errors import AppError
from src.rp_common.response import error_envelope, validation_envelope
from src.rp_distribution.api.router import router as distribution_router
from src.rp_engine.application.service import get_ledger_engine
from src.rp_event.api.router import router as event_router
from src.rp_gateway.middleware.request_log import RequestLogMiddleware
from src.rp_ledger.api.router import router as account_router
from src.rp_policy.api.router import router as policy_router
from src.rp_pool.api.router import router as pool_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB and load ledger state. Shutdown: dispose."""
    if settings.PERSISTENCE_ENABLED:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        async with get_session_factory()() as session:
            await get_ledger_engine().load(session)
    else:
        logger.warning("persistence disabled, ledger state is in-memory only")
    yield
    await dispose_engine()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("request failed code=%d: %s", exc.code, exc.message)
    return JSONResponse(status_code=exc.http_status, content=error_envelope(request, exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{field}: {first.get('msg', 'invalid request')}" if field else "invalid request"
    return JSONResponse(status_code=422, content=validation_envelope(request, detail))


app.include_router(account_router, prefix="/api/v1")
app.include_router(pool_router, prefix="/api/v1")
app.include_router(event_router, prefix="/api/v1")
app.include_router(policy_router, prefix="/api/v1")
app.include_router(distribution_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
