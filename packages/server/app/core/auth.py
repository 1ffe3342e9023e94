"""
Session handling and the authorization chain.

Supports:
- Local credential hashing (bcrypt) for the bundled auth endpoints
- Session tokens: signed JWTs carrying the session claims (role and
  organization cached at issue time)
- Revocation list in Redis
- Role gates: protected, org-or-admin, admin

Authorization decisions read the role cached in the token. A role change in
the store is only seen by the gates after the session is refreshed.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from app.core.config import get_settings
from app.core.errors import Forbidden, Unauthorized
from app.core.redis import get_redis
from app.models.user import User
from orgroles_shared.schemas.common import ORG_OR_ADMIN_ROLES, Role

log = structlog.get_logger()
settings = get_settings()

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# Session claims
# ---------------------------------------------------------------------------

def coerce_role(value: Optional[str]) -> Role:
    """Map a stored or claimed role to the closed role set; unknown means user."""
    try:
        return Role(value or Role.USER.value)
    except ValueError:
        return Role.USER


class SessionUser:
    """The caller as seen through their session claims."""

    def __init__(
        self,
        user_id: str,
        role: Role,
        organization_id: Optional[uuid.UUID] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
        email_verified: bool = False,
        jti: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ):
        self.user_id = user_id
        self.role = role
        self.organization_id = organization_id
        self.email = email
        self.name = name
        self.email_verified = email_verified
        self.jti = jti
        self.expires_at = expires_at

    @classmethod
    def from_claims(cls, payload: dict) -> "SessionUser":
        org_id = payload.get("organization_id")
        exp = payload.get("exp")
        return cls(
            user_id=payload["sub"],
            role=coerce_role(payload.get("role")),
            organization_id=uuid.UUID(org_id) if org_id else None,
            email=payload.get("email"),
            name=payload.get("name"),
            email_verified=bool(payload.get("email_verified", False)),
            jti=payload.get("jti"),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "organization_id": str(self.organization_id) if self.organization_id else None,
            "email_verified": self.email_verified,
        }


def create_session_token(
    user: User, *, expires_delta: timedelta | None = None
) -> tuple[str, str, datetime]:
    """Issue a signed session for a stored user. Returns (token, jti, expires_at)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.session_expire_minutes))
    payload = {
        "sub": user.id,
        "role": coerce_role(user.role).value,
        "organization_id": str(user.organization_id) if user.organization_id else None,
        "email": user.email,
        "name": user.name,
        "email_verified": user.email_verified,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti, exp


def decode_session_token(token: str) -> dict:
    """Decode and verify a session token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# Revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_session(jti: str, ttl_seconds: int = 3600) -> None:
    """Add a session id to the revocation list in Redis."""
    redis = await get_redis()
    await redis.setex(f"session:revoked:{jti}", max(ttl_seconds, 1), "1")


async def is_session_revoked(jti: str) -> bool:
    redis = await get_redis()
    return await redis.exists(f"session:revoked:{jti}") > 0


def remaining_ttl(expires_at: Optional[datetime]) -> int:
    if expires_at is None:
        return settings.session_expire_minutes * 60
    return int((expires_at - datetime.now(timezone.utc)).total_seconds())


# ---------------------------------------------------------------------------
# CSRF Token
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Authentication dependency (protected level)
# ---------------------------------------------------------------------------

def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    return request.cookies.get(settings.session_cookie_name)


async def get_session_user(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
) -> SessionUser:
    """Resolve the caller from their session. No store lookup is made."""
    token = _extract_token(request, authorization)
    if not token:
        raise Unauthorized()

    try:
        payload = decode_session_token(token)
    except jwt.PyJWTError:
        raise Unauthorized("Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_session_revoked(jti):
        raise Unauthorized("Session has been revoked")

    caller = SessionUser.from_claims(payload)
    request.state.session_user = caller
    return caller


# ---------------------------------------------------------------------------
# Role gates
# ---------------------------------------------------------------------------

async def require_org_or_admin(
    caller: SessionUser = Depends(get_session_user),
) -> SessionUser:
    """Requires the org or admin role."""
    if caller.role not in ORG_OR_ADMIN_ROLES:
        log.info("auth.denied", user_id=caller.user_id, role=caller.role.value, required="org_or_admin")
        raise Forbidden("You must be an organization member or admin to access this resource")
    return caller


async def require_admin(
    caller: SessionUser = Depends(get_session_user),
) -> SessionUser:
    """Requires the admin role."""
    if caller.role != Role.ADMIN:
        log.info("auth.denied", user_id=caller.user_id, role=caller.role.value, required="admin")
        raise Forbidden("You must be an admin to access this resource")
    return caller
