"""
Organization CRUD and soft deletion.

Tests cover:
- Request schema validation
- Create then list
- Partial update
- Soft delete: gone from listings, still resolvable directly, members untouched
- Zero-row writes surface as OPERATION_FAILED
"""

from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from orgroles_shared.schemas.organizations import OrgCreateRequest, OrgUpdateRequest

from conftest import bearer


class TestOrgSchemas:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            OrgCreateRequest(name="")

    def test_description_optional(self):
        assert OrgCreateRequest(name="Acme").description is None

    def test_update_tracks_set_fields(self):
        req = OrgUpdateRequest(id=uuid.uuid4(), description="new")
        assert req.model_dump(exclude_unset=True, exclude={"id"}) == {"description": "new"}

    def test_update_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            OrgUpdateRequest(id=uuid.uuid4(), name="")


class TestOrgCrud:
    async def _create(self, client, headers, name="Acme", description="desc") -> str:
        resp = await client.post(
            "/rpc/admin/createOrganization",
            json={"name": name, "description": description},
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        return body["organization_id"]

    async def _list(self, client, headers) -> list[dict]:
        resp = await client.post("/rpc/admin/getAllOrganizations", headers=headers)
        assert resp.status_code == 200
        return resp.json()["organizations"]

    async def test_create_then_list(self, client, admin, admin_headers):
        org_id = await self._create(client, admin_headers)
        orgs = await self._list(client, admin_headers)
        match = [o for o in orgs if o["id"] == org_id]
        assert len(match) == 1
        assert match[0]["name"] == "Acme"
        assert match[0]["description"] == "desc"
        assert match[0]["is_active"] is True

        resp = await client.post(
            "/rpc/admin/getOrganization", json={"id": org_id}, headers=admin_headers
        )
        assert resp.json()["organization"]["created_by"] == admin.id

    async def test_create_requires_name(self, client, admin_headers):
        resp = await client.post(
            "/rpc/admin/createOrganization", json={"name": ""}, headers=admin_headers
        )
        assert resp.status_code == 422

    async def test_partial_update(self, client, admin_headers):
        org_id = await self._create(client, admin_headers)
        resp = await client.post(
            "/rpc/admin/updateOrganization",
            json={"id": org_id, "name": "Acme Corp"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        resp = await client.post(
            "/rpc/admin/getOrganization", json={"id": org_id}, headers=admin_headers
        )
        org = resp.json()["organization"]
        assert org["name"] == "Acme Corp"
        assert org["description"] == "desc"

    async def test_soft_delete(self, client, admin_headers):
        org_id = await self._create(client, admin_headers)
        resp = await client.post(
            "/rpc/admin/deleteOrganization", json={"id": org_id}, headers=admin_headers
        )
        assert resp.status_code == 200

        assert org_id not in [o["id"] for o in await self._list(client, admin_headers)]

        resp = await client.post(
            "/rpc/admin/getOrganization", json={"id": org_id}, headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["organization"]["is_active"] is False

    async def test_reactivate_through_update(self, client, admin_headers):
        org_id = await self._create(client, admin_headers)
        await client.post(
            "/rpc/admin/deleteOrganization", json={"id": org_id}, headers=admin_headers
        )
        await client.post(
            "/rpc/admin/updateOrganization",
            json={"id": org_id, "is_active": True},
            headers=admin_headers,
        )
        assert org_id in [o["id"] for o in await self._list(client, admin_headers)]

    async def test_soft_delete_keeps_member_references(
        self, client, admin_headers, make_org, make_user
    ):
        org = await make_org()
        member = await make_user("org", org.id)

        await client.post(
            "/rpc/admin/deleteOrganization", json={"id": str(org.id)}, headers=admin_headers
        )

        resp = await client.post(
            "/rpc/admin/getOrganizationUsers",
            json={"organization_id": str(org.id)},
            headers=admin_headers,
        )
        assert [u["id"] for u in resp.json()["users"]] == [member.id]

        resp = await client.post("/rpc/user/getMyOrganization", headers=bearer(member))
        assert resp.json()["organization"]["is_active"] is False

    async def test_update_unknown_org_fails(self, client, admin_headers):
        resp = await client.post(
            "/rpc/admin/updateOrganization",
            json={"id": str(uuid.uuid4()), "name": "Nope"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "OPERATION_FAILED"
        assert error["message"] == "Failed to update organization"

    async def test_delete_unknown_org_fails(self, client, admin_headers):
        resp = await client.post(
            "/rpc/admin/deleteOrganization",
            json={"id": str(uuid.uuid4())},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "OPERATION_FAILED"

    async def test_get_unknown_org_is_not_found(self, client, admin_headers):
        resp = await client.post(
            "/rpc/admin/getOrganization",
            json={"id": str(uuid.uuid4())},
            headers=admin_headers,
        )
        assert resp.status_code == 404

    async def test_malformed_org_id_is_rejected(self, client, admin_headers):
        resp = await client.post(
            "/rpc/admin/deleteOrganization", json={"id": "not-an-id"}, headers=admin_headers
        )
        assert resp.status_code == 422

    async def test_any_user_lists_active_orgs(self, client, make_org, make_user):
        active = await make_org("Active")
        await make_org("Gone", is_active=False)
        resp = await client.post(
            "/rpc/user/getOrganizations", headers=bearer(await make_user())
        )
        assert resp.status_code == 200
        orgs = resp.json()["organizations"]
        assert [o["name"] for o in orgs] == ["Active"]
        assert orgs[0]["id"] == str(active.id)
        assert "is_active" not in orgs[0]
