from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Role(str, Enum):
    USER = "user"
    ORG = "org"
    ADMIN = "admin"


# Roles admitted by the org-or-admin gate
ORG_OR_ADMIN_ROLES: frozenset["Role"] = frozenset({Role.ORG, Role.ADMIN})


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorBody
