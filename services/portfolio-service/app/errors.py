"""Error hierarchy rendered as ``{"error": message}`` responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PortfolioError(Exception):
    """Base exception carrying the HTTP status and client-facing message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(PortfolioError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(PortfolioError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(PortfolioError):
    """Valid credentials lacking the privilege the route requires."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PortfolioError):
    status_code = status.HTTP_404_NOT_FOUND


class RateLimitError(PortfolioError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class ConfigurationError(PortfolioError):
    """Deployment misconfiguration detected at startup."""


async def portfolio_error_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    """Render a :class:`PortfolioError` as ``{"error": message}``."""
    logger.info(
        "%s %s rejected with %d: %s", request.method, request.url.path, exc.status_code, exc.message
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortfolioError, portfolio_error_handler)
