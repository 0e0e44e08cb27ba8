"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LoginCredentials:
    """Email/password pair submitted to the login endpoint."""

    email: str
    password: str
