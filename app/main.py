# app/main.py
from __future__ import annotations

"""
# KinoAdmin API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the KinoAdmin catalog admin
backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Explicit **middleware order**: 1) request id → 2) CORS → 3) gzip → 4) strip `Server` header.
- Centralized exception handling: every error uses the `success: false` envelope.
- Uploaded posters/video files are served read-only under `UPLOAD_URL_PREFIX`.

## Probes
- `/healthz` — liveness (process up).
- `/readyz` — readiness (DB, plus Redis when the revocation lane is enabled).
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable
import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse, Response

# -- Logging bootstrap (Loguru + stdlib intercept) ----------------------------
from app.core import logger as _logsetup  # noqa: F401

from app.api.v1.routers import router as api_v1_router
from app.core.config import settings
from app.core.exception_handlers import (
    app_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.exceptions import AppException
from app.core.redis_client import redis_wrapper
from app.db.session import db_healthcheck, dispose_engine
from app.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger("kinoadmin")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifecycle manager.

    Startup:
        - Connect Redis when the revocation lane is enabled (non-fatal on
          failure; `AUTH_FAIL_OPEN` then decides how token checks behave).

    Shutdown:
        - Dispose the DB engine and close Redis.
    """
    logger.info(f"✅ {settings.PROJECT_NAME} starting up ({settings.ENV})")

    if settings.REDIS_ENABLED:
        try:
            await redis_wrapper.connect()
            logger.info("🔌 Redis connected")
        except Exception:
            logger.exception("Redis connect failed (continuing in degraded mode)")

    try:
        yield
    finally:
        try:
            await dispose_engine()
            logger.info("🛑 Database engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")

        if settings.REDIS_ENABLED:
            try:
                await redis_wrapper.close()
                logger.info("🛑 Redis connection closed")
            except Exception:
                logger.exception("Error closing Redis client")

        logger.info(f"🛑 {settings.PROJECT_NAME} shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: fully wired application with middleware, exception handlers,
        routers, the uploads mount, and health/readiness endpoints.
    """
    enable_docs = settings.ENABLE_DOCS and not settings.is_production

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
        openapi_url="/openapi.json" if enable_docs else None,
        lifespan=lifespan,
    )

    # ── Middlewares (order matters) ─────────────────────────────────────────
    app.add_middleware(RequestIDMiddleware)  # 1) Correlation ID

    # 2) CORS (cookie session → credentials)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=3600,
    )

    # 3) GZip (safe defaults)
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    # 4) Strip the Server header at the end of the chain
    @app.middleware("http")
    async def _strip_server_header(request: Request, call_next: Callable) -> Response:
        response: Response = await call_next(request)
        if "server" in response.headers:
            del response.headers["server"]
        return response

    # ── Exception handlers ──────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]

    # ── Routers (versioned API) ─────────────────────────────────────────────
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # ── Uploaded media (posters, video files) ───────────────────────────────
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe: `{"ok": True}` when the process is responsive."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> JSONResponse:
        """
        Readiness probe.

        Redis counts only when `REDIS_ENABLED`; otherwise it is reported as
        `None` and does not affect `ready`.
        """
        db_ok = await db_healthcheck()

        redis_ok = None
        if settings.REDIS_ENABLED:
            redis_ok = await redis_wrapper.is_connected()
            if not redis_ok:
                try:
                    await redis_wrapper.connect()
                    redis_ok = await redis_wrapper.is_connected()
                except Exception:
                    redis_ok = False

        ready = bool(db_ok and redis_ok is not False)
        return JSONResponse(
            {"ready": ready, "checks": {"db": db_ok, "redis": redis_ok}},
            status_code=200 if ready else 503,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Minimal root that points to docs (when enabled)."""
        return JSONResponse(
            {
                "name": settings.PROJECT_NAME,
                "docs": app.docs_url or "",
                "version": settings.VERSION,
            }
        )

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn/Gunicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn app.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
