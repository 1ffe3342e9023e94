"""
Admin procedures. Every route here requires the admin role.

Organizations: createOrganization, getAllOrganizations, getOrganization,
updateOrganization, deleteOrganization, getOrganizationUsers.
Users: getAllUsers, updateUserRole, assignUserToOrganization,
updateUserWithRoleAndOrg, removeUserFromOrganization,
getUsersByOrganization, getUsersByRole.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import SessionUser, coerce_role, require_admin
from app.core.database import get_session
from app.models.user import User
from app.services import membership
from app.services import organizations as org_service
from app.services import users as user_service
from orgroles_shared.schemas.common import SuccessResponse
from orgroles_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgCreateResponse,
    OrgDetail,
    OrgDetailResponse,
    OrgIdRequest,
    OrgListItem,
    OrgListResponse,
    OrgUpdateRequest,
    OrgUsersRequest,
)
from orgroles_shared.schemas.users import (
    UserAssignRequest,
    UserDetail,
    UserDetailListResponse,
    UserIdRequest,
    UserListResponse,
    UserMembershipUpdateRequest,
    UserRoleUpdateRequest,
    UserSummary,
    UsersByRoleRequest,
)

router = APIRouter(dependencies=[Depends(require_admin)])


def _summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        role=coerce_role(user.role),
        organization_id=user.organization_id,
    )


def _detail(user: User) -> UserDetail:
    return UserDetail(
        **_summary(user).model_dump(),
        email_verified=user.email_verified,
        created_at=user.created_at,
    )


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

@router.post("/createOrganization", response_model=OrgCreateResponse)
async def create_organization(
    body: OrgCreateRequest,
    caller: SessionUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.create_org(body, caller.user_id, session)
    return OrgCreateResponse(
        organization_id=org.id, message="Organization created successfully"
    )


@router.post("/getAllOrganizations", response_model=OrgListResponse)
async def get_all_organizations(session: AsyncSession = Depends(get_session)):
    """Active organizations only."""
    orgs = await org_service.list_active_orgs(session)
    return OrgListResponse(organizations=[OrgListItem.model_validate(o) for o in orgs])


@router.post("/getOrganization", response_model=OrgDetailResponse)
async def get_organization(
    body: OrgIdRequest, session: AsyncSession = Depends(get_session)
):
    """Direct lookup, including soft-deleted organizations."""
    org = await org_service.get_org(body.id, session)
    return OrgDetailResponse(organization=OrgDetail.model_validate(org))


@router.post("/updateOrganization", response_model=SuccessResponse)
async def update_organization(
    body: OrgUpdateRequest, session: AsyncSession = Depends(get_session)
):
    await org_service.update_org(body, session)
    return SuccessResponse(message="Organization updated successfully")


@router.post("/deleteOrganization", response_model=SuccessResponse)
async def delete_organization(
    body: OrgIdRequest, session: AsyncSession = Depends(get_session)
):
    """Soft delete; members keep pointing at the organization."""
    await org_service.deactivate_org(body.id, session)
    return SuccessResponse(message="Organization deleted successfully")


@router.post("/getOrganizationUsers", response_model=UserListResponse)
async def get_organization_users(
    body: OrgUsersRequest, session: AsyncSession = Depends(get_session)
):
    users = await user_service.list_users_by_organization(body.organization_id, session)
    return UserListResponse(users=[_summary(u) for u in users])


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@router.post("/getAllUsers", response_model=UserDetailListResponse)
async def get_all_users(session: AsyncSession = Depends(get_session)):
    users = await user_service.list_users(session)
    return UserDetailListResponse(users=[_detail(u) for u in users])


@router.post("/updateUserRole", response_model=SuccessResponse)
async def update_user_role(
    body: UserRoleUpdateRequest, session: AsyncSession = Depends(get_session)
):
    """Takes effect for the target's gates once their session is refreshed."""
    await membership.update_user_role(body.user_id, body.role, session)
    return SuccessResponse(message="User role updated successfully")


@router.post("/assignUserToOrganization", response_model=SuccessResponse)
async def assign_user_to_organization(
    body: UserAssignRequest, session: AsyncSession = Depends(get_session)
):
    if body.role is not None:
        await membership.update_user_with_role_and_org(
            body.user_id, body.role, body.organization_id, session
        )
    else:
        await membership.assign_user_to_organization(
            body.user_id, body.organization_id, session
        )
    return SuccessResponse(message="User assigned to organization successfully")


@router.post("/updateUserWithRoleAndOrg", response_model=SuccessResponse)
async def update_user_with_role_and_org(
    body: UserMembershipUpdateRequest, session: AsyncSession = Depends(get_session)
):
    await membership.update_user_with_role_and_org(
        body.user_id,
        body.role,
        body.organization_id,
        session,
        clear_organization=body.clears_organization,
    )
    return SuccessResponse(message="User updated successfully")


@router.post("/removeUserFromOrganization", response_model=SuccessResponse)
async def remove_user_from_organization(
    body: UserIdRequest, session: AsyncSession = Depends(get_session)
):
    await membership.remove_user_from_organization(body.user_id, session)
    return SuccessResponse(message="User removed from organization successfully")


@router.post("/getUsersByOrganization", response_model=UserListResponse)
async def get_users_by_organization(
    body: OrgUsersRequest, session: AsyncSession = Depends(get_session)
):
    users = await user_service.list_users_by_organization(body.organization_id, session)
    return UserListResponse(users=[_summary(u) for u in users])


@router.post("/getUsersByRole", response_model=UserListResponse)
async def get_users_by_role(
    body: UsersByRoleRequest, session: AsyncSession = Depends(get_session)
):
    users = await user_service.list_users_by_role(body.role, session)
    return UserListResponse(users=[_summary(u) for u in users])
