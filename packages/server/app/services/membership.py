"""
Membership operations: the only writers of ``User.role`` and
``User.organization_id``.

Each operation resolves the target through ``resolve_user`` and then issues a
single UPDATE keyed on the primary key, so role and organization always
change together when both are requested.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import OperationFailed
from app.models.base import utcnow
from app.models.user import User
from app.services import organizations as org_service
from app.services.users import resolve_user
from orgroles_shared.schemas.common import Role

log = structlog.get_logger()


async def _resolve_or_fail(user_id: str, session: AsyncSession, failure: str) -> User:
    user = await resolve_user(user_id, session)
    if user is None:
        raise OperationFailed(failure)
    return user


async def _write_user(
    user: User, values: dict, session: AsyncSession, failure: str
) -> User:
    values["updated_at"] = utcnow()
    result = await session.execute(
        update(User).where(User.id == user.id).values(**values)
    )
    if result.rowcount == 0:
        raise OperationFailed(failure)

    await session.refresh(user)
    return user


async def update_user_role(user_id: str, role: Role, session: AsyncSession) -> User:
    failure = "Failed to update user role"
    user = await _resolve_or_fail(user_id, session, failure)
    user = await _write_user(user, {"role": role.value}, session, failure)
    log.info("user.role_updated", user_id=user.id, role=role.value)
    return user


async def assign_user_to_organization(
    user_id: str, organization_id: uuid.UUID, session: AsyncSession
) -> User:
    failure = "Failed to assign user to organization"
    user = await _resolve_or_fail(user_id, session, failure)
    await org_service.get_org(organization_id, session)
    user = await _write_user(
        user, {"organization_id": organization_id}, session, failure
    )
    log.info("user.organization_assigned", user_id=user.id, org_id=str(organization_id))
    return user


async def update_user_with_role_and_org(
    user_id: str,
    role: Role,
    organization_id: Optional[uuid.UUID],
    session: AsyncSession,
    *,
    clear_organization: bool = False,
) -> User:
    """Set the role and, if given, the organization in one statement.

    ``clear_organization`` writes a null organization alongside the role.
    With neither an organization nor ``clear_organization`` only the role
    changes.
    """
    failure = "Failed to update user"
    user = await _resolve_or_fail(user_id, session, failure)

    values: dict = {"role": role.value}
    if clear_organization:
        values["organization_id"] = None
    elif organization_id is not None:
        await org_service.get_org(organization_id, session)
        values["organization_id"] = organization_id

    user = await _write_user(user, values, session, failure)
    log.info(
        "user.membership_updated",
        user_id=user.id,
        role=role.value,
        org_id=str(user.organization_id) if user.organization_id else None,
    )
    return user


async def remove_user_from_organization(user_id: str, session: AsyncSession) -> User:
    failure = "Failed to remove user from organization"
    user = await _resolve_or_fail(user_id, session, failure)
    user = await _write_user(user, {"organization_id": None}, session, failure)
    log.info("user.organization_removed", user_id=user.id)
    return user
