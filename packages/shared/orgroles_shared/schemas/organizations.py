"""
Organization schemas shared between the server and its clients.

Covers: org create/update/delete requests, list and detail responses.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import SuccessResponse


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Organization display name")
    description: Optional[str] = Field(None, max_length=1000)


class OrgUpdateRequest(BaseModel):
    """Partial update; only fields that are set are written."""
    id: uuid.UUID
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None


class OrgIdRequest(BaseModel):
    id: uuid.UUID


class OrgUsersRequest(BaseModel):
    organization_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgCreateResponse(SuccessResponse):
    organization_id: uuid.UUID


class OrgListItem(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    is_active: bool

    model_config = {"from_attributes": True}


class OrgListResponse(BaseModel):
    organizations: list[OrgListItem]


class OrgSummary(BaseModel):
    """Reduced view shown to non-admin callers."""
    id: uuid.UUID
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class OrgSummaryListResponse(BaseModel):
    organizations: list[OrgSummary]


class OrgDetail(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrgDetailResponse(BaseModel):
    organization: OrgDetail


class MyOrganizationResponse(BaseModel):
    organization: Optional[OrgListItem] = None
    message: Optional[str] = None
