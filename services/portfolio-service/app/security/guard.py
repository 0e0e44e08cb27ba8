"""Bearer-token guard for admin-only routes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from fastapi import Header, Request

from ..errors import AuthenticationError, AuthorizationError
from ..metrics import GUARD_REJECTIONS
from .tokens import decode_access_token

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


@dataclass(frozen=True, slots=True)
class AdminIdentity:
    """Identity attached to a request that passed the guard."""

    user_id: str
    username: str
    is_admin: bool = True


def extract_bearer_token(authorization: str | None) -> str:
    """Return the raw token from an ``Authorization`` header value.

    The ``Bearer`` prefix is optional and matched case-insensitively.
    """
    value = (authorization or "").strip()
    if value[: len(_BEARER_PREFIX)].lower() == _BEARER_PREFIX:
        value = value[len(_BEARER_PREFIX) :].strip()
    return value


class AccessTokenGuard:
    """Stateless verifier turning an ``Authorization`` header into an :class:`AdminIdentity`."""

    def authenticate(self, authorization: str | None) -> AdminIdentity:
        if not authorization or not authorization.strip():
            raise AuthenticationError("No authorization header")

        token = extract_bearer_token(authorization)
        if not token:
            raise AuthenticationError("No authorization header")

        try:
            claims = decode_access_token(token)
        except jwt.PyJWTError as exc:
            logger.info("rejected access token: %s", exc)
            raise AuthenticationError("Invalid or expired token") from exc

        user_id = claims.get("user_id")
        username = claims.get("username")
        if not isinstance(user_id, str) or not isinstance(username, str):
            raise AuthenticationError("Invalid token claims")

        if claims.get("is_admin") is not True:
            logger.info("access denied for non-admin user %s", user_id)
            raise AuthorizationError("Access denied")

        return AdminIdentity(user_id=user_id, username=username)


access_token_guard = AccessTokenGuard()


def require_admin(
    request: Request,
    authorization: str | None = Header(default=None),
) -> AdminIdentity:
    """FastAPI dependency guarding admin routes; stores the identity on ``request.state``."""
    try:
        identity = access_token_guard.authenticate(authorization)
    except (AuthenticationError, AuthorizationError) as exc:
        GUARD_REJECTIONS.labels(status=str(exc.status_code)).inc()
        raise
    request.state.identity = identity
    return identity
