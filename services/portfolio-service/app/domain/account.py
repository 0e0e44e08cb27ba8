from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(slots=True)
class UserAccount:
    """A user allowed to sign in to the admin area."""

    id: UUID
    username: str
    email: str
    password_hash: str
    is_admin: bool
    created_at: datetime
    last_login: datetime | None = None
