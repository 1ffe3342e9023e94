"""
RPC error taxonomy and the JSON error envelope.

Every failure reaches the caller as::

    {"error": {"code": "FORBIDDEN", "message": "...", "status": 403}}
"""

from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_SUPPORTED",
    409: "CONFLICT",
    500: "INTERNAL_SERVER_ERROR",
}


class RPCError(HTTPException):
    """HTTPException with a stable, machine-readable code."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)


class Unauthorized(RPCError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "You must be logged in to access this resource"


class Forbidden(RPCError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You do not have access to this resource"


class NotFound(RPCError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(RPCError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class OperationFailed(RPCError):
    """A storage mutation touched no record."""

    status_code = 400
    code = "OPERATION_FAILED"
    default_message = "Operation failed"


class OrganizationUnassigned(RPCError):
    status_code = 400
    code = "ORGANIZATION_UNASSIGNED"
    default_message = "You are not assigned to any organization"


def error_body(code: str, message: str, status: int) -> dict:
    return {"error": {"code": code, "message": message, "status": status}}


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = getattr(exc, "code", None) or STATUS_CODES.get(exc.status_code, "ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )
