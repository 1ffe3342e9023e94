"""
RPC surface.

Every procedure is ``POST /rpc/<namespace>/<procedure>`` with a JSON body,
bound to one authorization level:

- public:        healthCheck
- protected:     privateData, user.getProfile, user.getMyOrganization,
                 user.getOrganizations
- org-or-admin:  user.getOrganizationMembers
- admin:         admin.*
"""

from fastapi import APIRouter, Depends

from app.core.auth import SessionUser, get_session_user
from . import admin, user

router = APIRouter()

router.include_router(admin.router, prefix="/admin", tags=["Admin"])
router.include_router(user.router, prefix="/user", tags=["User"])


@router.get("/healthCheck", tags=["RPC"])
async def health_check():
    return "OK"


@router.post("/privateData", tags=["RPC"])
async def private_data(caller: SessionUser = Depends(get_session_user)):
    return {"message": "This is private", "user": caller.to_dict()}
