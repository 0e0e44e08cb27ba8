"""Utilities for issuing and validating admin access tokens."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from ..config import get_signing_secret

TOKEN_ALGORITHM = "HS256"
TOKEN_TTL = timedelta(days=7)


def issue_access_token(
    *,
    user_id: str,
    username: str,
    email: str,
    is_admin: bool,
    now: datetime | None = None,
) -> str:
    """Create a signed JWT for an authenticated user.

    Parameters
    ----------
    user_id:
        Identifier embedded in the ``user_id`` claim.
    username:
        Display name embedded in the ``username`` claim.
    email:
        Address embedded in the ``email`` claim.
    is_admin:
        Privilege flag embedded in the ``is_admin`` claim.
    now:
        Issue time; defaults to the current UTC time.

    Returns
    -------
    str
        The encoded token. It always carries exactly ``user_id``, ``username``,
        ``email``, ``is_admin`` and ``exp`` (issue time plus seven days).
    """

    issued_at = now or datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "user_id": user_id,
        "username": username,
        "email": email,
        "is_admin": is_admin,
        "exp": int((issued_at + TOKEN_TTL).timestamp()),
    }
    return jwt.encode(payload, get_signing_secret(), algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token returning its claims.

    Raises
    ------
    jwt.PyJWTError
        Propagated when the signature is invalid, the algorithm is not HS256,
        ``exp`` is missing or in the past, or the token is malformed.
    """

    return jwt.decode(
        token,
        get_signing_secret(),
        algorithms=[TOKEN_ALGORITHM],
        options={"require": ["exp"]},
    )
