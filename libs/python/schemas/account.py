"""Account-related DTOs shared across services."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, EmailStr


class UserSummary(BaseModel):
    id: UUID
    username: str
    email: EmailStr
    is_admin: bool
