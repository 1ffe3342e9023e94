"""User, membership and profile schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from .common import Role
from .organizations import OrgSummary


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserRoleUpdateRequest(BaseModel):
    user_id: str = Field(min_length=1)
    role: Role


class UserAssignRequest(BaseModel):
    """Assign a user to an organization, optionally changing their role too."""
    user_id: str = Field(min_length=1)
    organization_id: uuid.UUID
    role: Optional[Role] = None


class UserMembershipUpdateRequest(BaseModel):
    """Set role and organization together.

    Omitting ``organization_id`` leaves the organization untouched; sending
    it as ``null`` clears it.
    """
    user_id: str = Field(min_length=1)
    role: Role
    organization_id: Optional[uuid.UUID] = None

    @property
    def clears_organization(self) -> bool:
        return "organization_id" in self.model_fields_set and self.organization_id is None


class UserIdRequest(BaseModel):
    user_id: str = Field(min_length=1)


class UsersByRoleRequest(BaseModel):
    role: Role


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Role = Role.USER
    organization_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}


class UserDetail(UserSummary):
    email_verified: bool = False
    created_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    users: List[UserSummary]


class UserDetailListResponse(BaseModel):
    users: List[UserDetail]


class MemberResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Role = Role.USER

    model_config = {"from_attributes": True}


class MemberListResponse(BaseModel):
    members: List[MemberResponse]


class ProfileResponse(BaseModel):
    """Profile as stored, not as cached in the caller's session."""
    user: UserDetail
    organization: Optional[OrgSummary] = None
