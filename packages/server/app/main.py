"""
Org roles API server

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text

from app.api.rpc import router as rpc_router
from app.api.rpc.auth import router as auth_router
from app.core.config import get_settings
from app.core.database import close_db, get_session_context, init_db
from app.core.errors import http_exception_handler
from app.core.logging import configure_logging
from app.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from app.core.redis import close_redis, ping_redis

settings = get_settings()
log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("server.starting", create_tables=settings.create_tables)
    if settings.create_tables:
        await init_db()
    yield
    log.info("server.stopping")
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Org Roles",
        description="Role-based access control and organization membership.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware (last added is outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    app.include_router(rpc_router, prefix="/rpc")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness probe: database and Redis must both answer."""
        try:
            async with get_session_context() as session:
                await session.execute(text("SELECT 1"))
            await ping_redis()
        except Exception as exc:
            log.warning("server.not_ready", error=str(exc))
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    return app


app = create_app()
