"""
Identity Store access: user lookup and listing.

User ids reach us in whichever encoding the store had when the record was
written. ``resolve_user`` is the one place that knows about the older schemes.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import Conflict
from app.core.auth import hash_password
from app.models.user import User
from orgroles_shared.schemas.common import Role

log = structlog.get_logger()


def canonical_uuid_key(user_id: str) -> Optional[str]:
    """Render ``user_id`` as a canonical UUID string, or None if it isn't one."""
    try:
        return str(uuid.UUID(user_id))
    except (ValueError, TypeError, AttributeError):
        return None


async def resolve_user(user_id: str, session: AsyncSession) -> Optional[User]:
    """Find a user by any id scheme the store has used; first hit wins.

    Tried in order: primary key as given, primary key as a canonical UUID
    rendering of the given id, then the legacy id column.
    """
    user = await session.get(User, user_id)
    if user is not None:
        return user

    native = canonical_uuid_key(user_id)
    if native is not None and native != user_id:
        user = await session.get(User, native)
        if user is not None:
            log.debug("user.resolved_legacy_id", user_id=user_id, scheme="uuid")
            return user

    result = await session.execute(select(User).where(User.legacy_id == user_id))
    user = result.scalars().first()
    if user is not None:
        log.debug("user.resolved_legacy_id", user_id=user_id, scheme="legacy_id")
    return user


async def get_user_by_email(email: str, session: AsyncSession) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def create_user(
    email: str,
    password: str,
    name: str,
    session: AsyncSession,
    *,
    role: Role = Role.USER,
) -> User:
    """Create a user with the default role and no organization."""
    if await get_user_by_email(email, session):
        raise Conflict("Email already registered")

    user = User(
        id=str(uuid.uuid4()),
        email=email.lower(),
        name=name,
        password_hash=hash_password(password),
        role=role.value,
    )
    session.add(user)
    await session.flush()
    log.info("user.created", user_id=user.id, role=user.role)
    return user


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.created_at))
    return list(result.scalars().all())


async def list_users_by_role(role: Role, session: AsyncSession) -> list[User]:
    result = await session.execute(
        select(User).where(User.role == role.value).order_by(User.created_at)
    )
    return list(result.scalars().all())


async def list_users_by_organization(
    organization_id: uuid.UUID, session: AsyncSession
) -> list[User]:
    """Users whose organization_id matches, whether or not the org is active."""
    result = await session.execute(
        select(User)
        .where(User.organization_id == organization_id)
        .order_by(User.created_at)
    )
    return list(result.scalars().all())
