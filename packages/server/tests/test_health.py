"""
Health, readiness and public procedure tests.
"""

from unittest.mock import AsyncMock, patch

from httpx import AsyncClient


async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_ready_check(client: AsyncClient):
    with patch("app.main.ping_redis", AsyncMock(return_value=True)):
        response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


async def test_ready_check_reports_unavailable_redis(client: AsyncClient):
    with patch("app.main.ping_redis", AsyncMock(side_effect=ConnectionError("down"))):
        response = await client.get("/ready")
    assert response.status_code == 503
    assert response.json() == {"status": "unavailable"}


async def test_public_health_procedure_needs_no_session(client: AsyncClient):
    response = await client.get("/rpc/healthCheck")
    assert response.status_code == 200
    assert response.json() == "OK"


async def test_security_headers_on_every_response(client: AsyncClient):
    response = await client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/rpc/noSuchProcedure")
    assert response.status_code == 404
    assert response.json() == {
        "error": {"code": "NOT_FOUND", "message": "Not Found", "status": 404}
    }


async def test_wrong_method_uses_error_envelope(client: AsyncClient, admin_headers):
    response = await client.get("/rpc/admin/getAllUsers", headers=admin_headers)
    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_SUPPORTED"
    assert "POST" in response.headers["allow"]
