"""
Security middleware: CSRF protection and security headers.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.config import get_settings
from app.core.errors import error_body

settings = get_settings()

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection for cookie-authenticated calls.

    Skipped for safe methods, for bearer-token callers (the mobile client),
    and for requests that carry no session cookie.
    """

    def __init__(self, app, session_cookie: str | None = None, csrf_cookie: str | None = None):
        super().__init__(app)
        self.session_cookie = session_cookie or settings.session_cookie_name
        self.csrf_cookie = csrf_cookie or settings.csrf_cookie_name

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method in SAFE_METHODS:
            return await call_next(request)

        if request.headers.get("Authorization"):
            return await call_next(request)

        if self.session_cookie not in request.cookies:
            return await call_next(request)

        cookie_token = request.cookies.get(self.csrf_cookie)
        header_token = request.headers.get("X-CSRF-Token")

        if not cookie_token or not header_token or cookie_token != header_token:
            return JSONResponse(
                status_code=403,
                content=error_body("CSRF_VALIDATION_FAILED", "Invalid or missing CSRF token.", 403),
            )

        return await call_next(request)
