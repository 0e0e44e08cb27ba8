"""Login workflow: credential checks, last-login bookkeeping and token issuance."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import psycopg
from email_validator import EmailNotValidError, validate_email

from .account import UserAccount
from .contracts import LoginCredentials
from ..errors import AuthenticationError, AuthorizationError, ValidationError
from ..metrics import LOGIN_ATTEMPTS
from ..repository import PortfolioRepository
from ..security.passwords import verify_password
from ..security.tokens import issue_access_token

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoginResult:
    """Signed token plus the account it was issued for."""

    token: str
    user: UserAccount


class AuthService:
    """Authenticates admin users against stored bcrypt hashes."""

    def __init__(self, repository: PortfolioRepository) -> None:
        """Store the repository used to look up and update users."""
        self._repository = repository

    def login(self, credentials: LoginCredentials) -> LoginResult:
        """Verify ``credentials`` and issue an access token.

        Raises
        ------
        ValidationError
            Email or password missing, or the email is malformed.
        AuthenticationError
            Unknown email or wrong password.
        AuthorizationError
            Correct password for an account without admin rights.
        """
        email = credentials.email.strip()
        if not email or not credentials.password:
            raise ValidationError("Email and Password are required")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValidationError("Invalid email format") from exc

        user = self._repository.get_user_by_email(email)
        if user is None or not verify_password(credentials.password, user.password_hash):
            LOGIN_ATTEMPTS.labels(outcome="invalid").inc()
            logger.info("login failed for %s", email)
            raise AuthenticationError("Invalid credentials")

        if not user.is_admin:
            LOGIN_ATTEMPTS.labels(outcome="forbidden").inc()
            logger.info("login refused for non-admin user %s", user.id)
            raise AuthorizationError("Access denied")

        now = datetime.now(timezone.utc)
        try:
            self._repository.record_login(user.id, now)
            user.last_login = now
        except psycopg.Error as exc:
            logger.warning("failed to update last_login for %s: %s", user.id, exc)

        token = issue_access_token(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            is_admin=user.is_admin,
            now=now,
        )
        LOGIN_ATTEMPTS.labels(outcome="success").inc()
        logger.info("admin %s logged in", user.id)
        return LoginResult(token=token, user=user)
