"""
Session endpoints.

- Email/password registration and login (stand-in for an external auth provider)
- Session inspection, forced refresh and logout

A session caches the user's role and organization when it is issued. Call
``/auth/session/refresh`` after a role or membership change to pick up the
stored values.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    SessionUser,
    create_session_token,
    generate_csrf_token,
    get_session_user,
    remaining_ttl,
    revoke_session,
    verify_password,
)
from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import Unauthorized
from app.models.user import User
from app.services import users as user_service

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

COOKIE_KWARGS = {
    "httponly": True,
    "secure": not settings.debug,  # allow non-HTTPS in dev
    "samesite": "lax",
    "path": "/",
    "max_age": settings.session_expire_minutes * 60,
}


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=200)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SessionResponse(BaseModel):
    token: str
    expires_at: datetime
    user: dict


class SessionInfo(BaseModel):
    user: dict
    expires_at: Optional[datetime] = None


def _issue(response: Response, user: User, event: str) -> SessionResponse:
    token, jti, expires_at = create_session_token(user)
    response.set_cookie(key=settings.session_cookie_name, value=token, **COOKIE_KWARGS)
    response.set_cookie(
        key=settings.csrf_cookie_name,
        value=generate_csrf_token(),
        **{**COOKIE_KWARGS, "httponly": False},  # JS must read this
    )
    log.info(event, user_id=user.id, role=user.role, jti=jti)
    claims = SessionUser.from_claims(
        {
            "sub": user.id,
            "role": user.role,
            "organization_id": str(user.organization_id) if user.organization_id else None,
            "email": user.email,
            "name": user.name,
            "email_verified": user.email_verified,
        }
    )
    return SessionResponse(token=token, expires_at=expires_at, user=claims.to_dict())


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """New accounts start with the user role and no organization."""
    user = await user_service.create_user(body.email, body.password, body.name, session)
    return _issue(response, user, "session.issued")


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.get_user_by_email(body.email, session)
    if not user or not user.password_hash or not verify_password(body.password, user.password_hash):
        raise Unauthorized("Invalid email or password")
    return _issue(response, user, "session.issued")


@router.get("/session", response_model=SessionInfo)
async def get_current_session(caller: SessionUser = Depends(get_session_user)):
    """The cached claims the authorization gates are using."""
    return SessionInfo(user=caller.to_dict(), expires_at=caller.expires_at)


@router.post("/session/refresh", response_model=SessionResponse)
async def refresh_session(
    response: Response,
    caller: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
):
    """Re-read role and organization from the store and reissue the session."""
    user = await user_service.resolve_user(caller.user_id, session)
    if user is None:
        raise Unauthorized("User not found")

    if caller.jti:
        await revoke_session(caller.jti, remaining_ttl(caller.expires_at))
    return _issue(response, user, "session.refreshed")


@router.post("/logout")
async def logout(
    response: Response,
    caller: SessionUser = Depends(get_session_user),
):
    if caller.jti:
        await revoke_session(caller.jti, remaining_ttl(caller.expires_at))
    log.info("session.revoked", user_id=caller.user_id, jti=caller.jti)
    response.delete_cookie(settings.session_cookie_name, path="/")
    response.delete_cookie(settings.csrf_cookie_name, path="/")
    return {"message": "Logged out"}
