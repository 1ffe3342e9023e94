"""
Organization service: org CRUD and soft deletion.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFound, OperationFailed
from app.models.base import utcnow
from app.models.organization import Organization
from orgroles_shared.schemas.organizations import OrgCreateRequest, OrgUpdateRequest

log = structlog.get_logger()


async def create_org(
    req: OrgCreateRequest, creator_id: str, session: AsyncSession
) -> Organization:
    """Create an active org. Membership is not granted to the creator."""
    org = Organization(
        name=req.name,
        description=req.description,
        is_active=True,
        created_by=creator_id,
    )
    session.add(org)
    await session.flush()

    log.info("org.created", org_id=str(org.id), creator=creator_id)
    return org


async def list_active_orgs(session: AsyncSession) -> list[Organization]:
    result = await session.execute(
        select(Organization)
        .where(Organization.is_active == True)  # noqa: E712
        .order_by(Organization.created_at)
    )
    return list(result.scalars().all())


async def find_org(org_id: uuid.UUID, session: AsyncSession) -> Organization | None:
    """Direct lookup; inactive orgs are returned too."""
    return await session.get(Organization, org_id)


async def get_org(org_id: uuid.UUID, session: AsyncSession) -> Organization:
    org = await find_org(org_id, session)
    if org is None:
        raise NotFound("Organization not found")
    return org


async def _write_org(
    org_id: uuid.UUID, values: dict, session: AsyncSession, failure: str
) -> None:
    values["updated_at"] = utcnow()
    result = await session.execute(
        update(Organization).where(Organization.id == org_id).values(**values)
    )
    # Unknown ids and no-op writes are reported the same way.
    if result.rowcount == 0:
        raise OperationFailed(failure)


async def update_org(req: OrgUpdateRequest, session: AsyncSession) -> None:
    """Merge the fields set on the request into the stored org."""
    values = req.model_dump(exclude_unset=True, exclude={"id"})
    if values.get("name") is None:
        values.pop("name", None)
    if "is_active" in values and values["is_active"] is None:
        values.pop("is_active")

    await _write_org(req.id, values, session, "Failed to update organization")
    log.info("org.updated", org_id=str(req.id), fields=sorted(values))


async def deactivate_org(org_id: uuid.UUID, session: AsyncSession) -> None:
    """Soft delete. Members keep their organization_id."""
    await _write_org(org_id, {"is_active": False}, session, "Failed to delete organization")
    log.info("org.deactivated", org_id=str(org_id))
