"""FastAPI application wiring for the portfolio service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.admin import router as admin_router
from .api.auth import router as auth_router
from .api.dependencies import build_login_rate_limiter
from .api.public import router as public_router
from .config import get_settings, get_signing_secret
from .domain.content import ContentService
from .domain.service import AuthService
from .errors import register_error_handlers
from .repository import PortfolioRepository

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (signing secret, Postgres pool, limiter, services) for the app lifecycle."""
    # Fails startup in production when JWT_SECRET is missing.
    get_signing_secret()

    pool = ConnectionPool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        max_lifetime=300,
        open=False,
    )
    pool.open()
    repository = PortfolioRepository(pool)
    limiter = build_login_rate_limiter(settings)
    app.state.pool = pool
    app.state.repository = repository
    app.state.login_rate_limiter = limiter
    app.state.auth_service = AuthService(repository)
    app.state.content_service = ContentService(repository)
    logger.info("%s %s starting (env=%s)", settings.app_name, settings.version, settings.environment)
    try:
        yield
    finally:
        limiter.close()
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    max_age=600,
)

register_error_handlers(app)


@app.get("/health", tags=["health"])
def health(request: Request) -> dict[str, str]:
    """Return service and database status used by orchestration systems."""
    repository: PortfolioRepository = request.app.state.repository
    return {
        "status": "ok",
        "message": "Portfolio API is running",
        "database": "connected" if repository.ping() else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


@app.get("/health/db", tags=["health"])
def health_db(request: Request) -> dict[str, int]:
    """Expose connection pool statistics for debugging."""
    repository: PortfolioRepository = request.app.state.repository
    return repository.pool_stats()


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(auth_router)
app.include_router(public_router)
app.include_router(admin_router)


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
