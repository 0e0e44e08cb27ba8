"""Request-scoped dependencies shared by the HTTP routers."""

from __future__ import annotations

import logging
from typing import Union

from fastapi import Request

from ..config import Settings
from ..domain.content import ContentService
from ..domain.service import AuthService
from ..errors import RateLimitError
from ..metrics import LOGIN_RATE_LIMITED
from ..security.rate_limiter import RateLimitConfig, VisitorRateLimiter
from ..security.redis_rate_limiter import RedisVisitorRateLimiter

logger = logging.getLogger(__name__)

LoginRateLimiter = Union[VisitorRateLimiter, RedisVisitorRateLimiter]

TOO_MANY_ATTEMPTS = "Too many login attempts. Please try again later."


def build_login_rate_limiter(settings: Settings) -> LoginRateLimiter:
    """Instantiate the configured login limiter backend, preferring Redis when available."""
    config = RateLimitConfig(
        max_requests=settings.login_rate_limit_requests,
        window_seconds=settings.login_rate_limit_window_seconds,
        block_seconds=settings.login_rate_limit_block_seconds,
    )
    if settings.rate_limit_backend == "redis" and settings.redis_url:
        try:
            import redis

            client = redis.from_url(settings.redis_url)
            # ensure connectivity early to fail fast and fall back
            client.ping()
            logger.info("login rate limiter configured for redis backend at %s", settings.redis_url)
            return RedisVisitorRateLimiter(client, config=config)
        except Exception as exc:  # pragma: no cover - depends on a live redis
            logger.warning("redis rate limiter unavailable, falling back to in-memory: %s", exc)

    logger.info(
        "login rate limiter using in-memory backend (%d requests / %ss)",
        config.max_requests,
        config.window_seconds,
    )
    return VisitorRateLimiter(config, sweep_interval=settings.rate_limit_sweep_seconds)


def client_address(request: Request) -> str:
    """Return the source address used to key per-client state."""
    return request.client.host if request.client else "unknown"


def enforce_login_rate_limit(request: Request) -> None:
    """Reject the request with 429 once its client exceeds the login limit."""
    limiter: LoginRateLimiter = request.app.state.login_rate_limiter
    address = client_address(request)
    if not limiter.allow(address):
        LOGIN_RATE_LIMITED.inc()
        logger.warning("login rate limit exceeded for %s", address)
        raise RateLimitError(TOO_MANY_ATTEMPTS)


def get_auth_service(request: Request) -> AuthService:
    """Resolve the `AuthService` stored on the FastAPI application state."""
    service: AuthService = request.app.state.auth_service
    return service


def get_content_service(request: Request) -> ContentService:
    """Resolve the `ContentService` stored on the FastAPI application state."""
    service: ContentService = request.app.state.content_service
    return service
