"""
Procedures for any signed-in caller.

Profile and organization reads go to the Identity Store rather than the
session claims, so they show a role change before the caller's session is
refreshed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import SessionUser, coerce_role, get_session_user, require_org_or_admin
from app.core.database import get_session
from app.core.errors import OrganizationUnassigned
from app.services import organizations as org_service
from app.services import users as user_service
from orgroles_shared.schemas.organizations import (
    MyOrganizationResponse,
    OrgListItem,
    OrgSummary,
    OrgSummaryListResponse,
)
from orgroles_shared.schemas.users import (
    MemberListResponse,
    MemberResponse,
    ProfileResponse,
    UserDetail,
)

router = APIRouter()


@router.post("/getProfile", response_model=ProfileResponse)
async def get_profile(
    caller: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
):
    stored = await user_service.resolve_user(caller.user_id, session)
    organization = None
    if stored is not None and stored.organization_id is not None:
        organization = await org_service.find_org(stored.organization_id, session)

    return ProfileResponse(
        user=UserDetail(
            id=caller.user_id,
            name=caller.name,
            email=caller.email,
            role=coerce_role(stored.role if stored else None),
            organization_id=stored.organization_id if stored else None,
            email_verified=caller.email_verified,
            created_at=stored.created_at if stored else None,
        ),
        organization=OrgSummary.model_validate(organization) if organization else None,
    )


@router.post("/getMyOrganization", response_model=MyOrganizationResponse)
async def get_my_organization(
    caller: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
):
    stored = await user_service.resolve_user(caller.user_id, session)
    if stored is None or stored.organization_id is None:
        return MyOrganizationResponse(message="You are not assigned to any organization")

    organization = await org_service.find_org(stored.organization_id, session)
    if organization is None:
        return MyOrganizationResponse(message="Organization not found")

    return MyOrganizationResponse(organization=OrgListItem.model_validate(organization))


@router.post("/getOrganizations", response_model=OrgSummaryListResponse)
async def get_organizations(
    caller: SessionUser = Depends(get_session_user),
    session: AsyncSession = Depends(get_session),
):
    orgs = await org_service.list_active_orgs(session)
    return OrgSummaryListResponse(organizations=[OrgSummary.model_validate(o) for o in orgs])


@router.post("/getOrganizationMembers", response_model=MemberListResponse)
async def get_organization_members(
    caller: SessionUser = Depends(require_org_or_admin),
    session: AsyncSession = Depends(get_session),
):
    """Members of the caller's stored organization."""
    stored = await user_service.resolve_user(caller.user_id, session)
    if stored is None or stored.organization_id is None:
        raise OrganizationUnassigned()

    members = await user_service.list_users_by_organization(stored.organization_id, session)
    return MemberListResponse(
        members=[
            MemberResponse(id=m.id, name=m.name, email=m.email, role=coerce_role(m.role))
            for m in members
        ]
    )
