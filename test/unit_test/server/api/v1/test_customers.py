"""API tests for customer profiles."""

from sqlmodel import select

from transparent_trust.core.database.entities.audit_logs import AuditLog

BASE = "/api/v1/customers"


async def _create(client, headers, **overrides):
    payload = {
        "name": "Acme Bank",
        "overview": "Retail bank in New England.",
        "industry": "Finance",
        "key_facts": [{"label": "HQ", "value": "Boston"}],
        "tags": ["finance"],
    }
    payload.update(overrides)
    response = await client.post(BASE, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCustomers:
    async def test_create(self, client, admin_headers):
        created = await _create(client, admin_headers)

        assert created["owner_id"] == "u-admin"
        assert created["created_by"] == "u-admin@example.com"
        assert created["key_facts"] == [{"label": "HQ", "value": "Boston"}]
        assert [h["action"] for h in created["history"]] == ["created"]
        assert created["history"][0]["user"] == "u-admin@example.com"

    async def test_requires_manage_knowledge(self, client, user_headers):
        response = await client.post(BASE, json={"name": "x", "overview": "y"}, headers=user_headers)
        assert response.status_code == 403

    async def test_list_filters_and_pagination(self, client, admin_headers, user_headers):
        await _create(client, admin_headers, name="Acme Bank")
        await _create(client, admin_headers, name="Globex", industry="Energy", overview="Power utility.")
        await _create(client, admin_headers, name="Initech", industry="Software", overview="Bank software.")

        response = await client.get(BASE, params={"industry": "Energy"}, headers=user_headers)
        assert [c["name"] for c in response.json()["data"]] == ["Globex"]

        response = await client.get(BASE, params={"search": "bank"}, headers=user_headers)
        assert sorted(c["name"] for c in response.json()["data"]) == ["Acme Bank", "Initech"]

        response = await client.get(BASE, params={"limit": 2, "offset": 0}, headers=user_headers)
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_more"] is True

    async def test_update_appends_history(self, client, admin_headers, session):
        created = await _create(client, admin_headers)

        response = await client.put(
            f"{BASE}/{created['id']}", json={"tier": "Enterprise", "region": "NA"}, headers=admin_headers
        )
        data = response.json()["data"]
        assert data["tier"] == "Enterprise"
        assert data["name"] == "Acme Bank"
        assert data["history"][-1]["action"] == "updated"
        assert data["history"][-1]["summary"].startswith("Updated ")

        response = await client.put(
            f"{BASE}/{created['id']}", json={"overview": "Regional bank.", "is_refresh": True}, headers=admin_headers
        )
        assert response.json()["data"]["history"][-1]["action"] == "refreshed"

        entries = (
            await session.execute(select(AuditLog).where(AuditLog.action == "UPDATED"))
        ).scalars().all()
        assert len(entries) == 2
        assert {e.details["is_refresh"] for e in entries} == {False, True}

    async def test_get_missing(self, client, user_headers):
        response = await client.get(f"{BASE}/missing", headers=user_headers)

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Customer profile not found"

    async def test_delete(self, client, admin_headers):
        created = await _create(client, admin_headers)

        response = await client.delete(f"{BASE}/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert (await client.get(f"{BASE}/{created['id']}", headers=admin_headers)).status_code == 404

    async def test_delete_linked_profile_is_refused(self, client, admin_headers):
        created = await _create(client, admin_headers)
        project = await client.post(
            "/api/v1/projects",
            json={"name": "Acme RFP", "customer_id": created["id"]},
            headers=admin_headers,
        )
        assert project.status_code == 201

        response = await client.delete(f"{BASE}/{created['id']}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == (
            "Customer profile is linked to 1 project(s) and cannot be deleted"
        )
