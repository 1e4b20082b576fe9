"""WorkSync — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from worksync.attendance.router import holidays_router
from worksync.attendance.router import router as attendance_router
from worksync.common.exceptions import register_exception_handlers
from worksync.common.rate_limit import limiter
from worksync.config import settings
from worksync.dashboard.router import router as dashboard_router
from worksync.database import engine
from worksync.leave.router import router as leave_router
from worksync.logging_config import configure_logging
from worksync.policy.router import router as settings_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("WorkSync starting (%s, tz=%s)", settings.ENVIRONMENT, settings.TIMEZONE)
    yield
    await engine.dispose()
    logger.info("WorkSync stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="WorkSync",
        description="Attendance reconciliation and leave policy engine",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(attendance_router, prefix="/api/v1/attendance", tags=["attendance"])
    app.include_router(holidays_router, prefix="/api/v1/holidays", tags=["holidays"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])
    app.include_router(settings_router, prefix="/api/v1/settings", tags=["settings"])

    return app


app = create_app()
