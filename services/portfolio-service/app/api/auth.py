"""Login and logout endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from schemas import UserSummary

from ..domain.contracts import LoginCredentials
from ..domain.service import AuthService
from .dependencies import enforce_login_rate_limit, get_auth_service
from .responses import MessageResponse

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Credentials submitted by the admin login form."""

    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(enforce_login_rate_limit)],
)
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Exchange admin credentials for a signed access token."""
    result = service.login(LoginCredentials(email=payload.email, password=payload.password))
    return LoginResponse(
        token=result.token,
        user=UserSummary(
            id=result.user.id,
            username=result.user.username,
            email=result.user.email,
            is_admin=result.user.is_admin,
        ),
    )


@router.post("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Tokens are stateless; the client simply discards its copy."""
    return MessageResponse(message="Logged out successfully")
