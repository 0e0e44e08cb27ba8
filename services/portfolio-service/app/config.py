from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
import os

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

INSECURE_DEV_SECRET = "your-super-secret-jwt-key-change-this-in-production"


def _database_url() -> str:
    """Return ``POSTGRES_URL`` or a libpq DSN assembled from the ``DB_*`` variables."""
    url = os.getenv("POSTGRES_URL")
    if url:
        return url
    return " ".join(
        [
            f"host={os.getenv('DB_HOST', 'localhost')}",
            f"port={os.getenv('DB_PORT', '5432')}",
            f"user={os.getenv('DB_USER', 'portfolio')}",
            f"password={os.getenv('DB_PASSWORD', 'portfolio')}",
            f"dbname={os.getenv('DB_NAME', 'portfolio')}",
            f"sslmode={os.getenv('DB_SSLMODE', 'disable')}",
        ]
    )


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = "portfolio-service"
    version: str = "1.0.0"
    environment: str = os.getenv("ENV", "development").lower()
    database_url: str = _database_url()
    db_pool_min_size: int = int(os.getenv("DB_POOL_MIN_SIZE", "5"))
    db_pool_max_size: int = int(os.getenv("DB_POOL_MAX_SIZE", "25"))
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("PORT", "8000"))
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    login_rate_limit_requests: int = int(os.getenv("LOGIN_RATE_LIMIT_REQUESTS", "5"))
    login_rate_limit_window_seconds: int = int(os.getenv("LOGIN_RATE_LIMIT_WINDOW_SECONDS", "900"))
    login_rate_limit_block_seconds: int = int(os.getenv("LOGIN_RATE_LIMIT_BLOCK_SECONDS", "900"))
    rate_limit_sweep_seconds: float = float(os.getenv("RATE_LIMIT_SWEEP_SECONDS", "60"))
    rate_limit_backend: str = os.getenv("RATE_LIMIT_BACKEND", "memory").lower()
    redis_url: str = os.getenv("REDIS_URL", "")

    @property
    def is_production(self) -> bool:
        return self.environment in ("production", "prod")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()


def resolve_signing_secret(settings: Settings) -> str:
    """Return the JWT signing secret for ``settings``.

    Raises
    ------
    ConfigurationError
        When ``JWT_SECRET`` is unset in a production environment.
    """
    if settings.jwt_secret:
        return settings.jwt_secret
    if settings.is_production:
        raise ConfigurationError("JWT_SECRET must be set when ENV=production")
    logger.warning(
        "JWT_SECRET is not set; signing tokens with the insecure development secret (ENV=%s)",
        settings.environment,
    )
    return INSECURE_DEV_SECRET


@lru_cache(maxsize=1)
def get_signing_secret() -> str:
    """Return the process-wide signing secret, resolved once."""
    return resolve_signing_secret(get_settings())
