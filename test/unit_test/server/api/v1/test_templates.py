"""API tests for template CRUD and template filling."""

from sqlmodel import select

from transparent_trust.core.database.entities.audit_logs import AuditLog
from transparent_trust.core.database.entities.llm_usage import LlmUsage

BASE = "/api/v1/templates"


async def _create(client, headers, **overrides):
    payload = {"name": "Security Overview", "content": "# {{customer.name}}\n\n{{custom.tagline}}", "category": "security"}
    payload.update(overrides)
    response = await client.post(BASE, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestTemplateCrud:
    async def test_create_and_get(self, client, admin_headers, session):
        created = await _create(client, admin_headers)

        assert created["output_format"] == "markdown"
        assert created["created_by"] == "u-admin@example.com"
        assert created["is_active"] is True

        response = await client.get(f"{BASE}/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        hints = response.json()["data"]["placeholder_hints"]
        assert hints == {
            "{{customer.name}}": "Customer field: name",
            "{{custom.tagline}}": "Custom value: tagline (user-provided)",
        }

        entries = (await session.execute(select(AuditLog))).scalars().all()
        assert [(e.entity_type, e.action) for e in entries] == [("TEMPLATE", "CREATED")]

    async def test_list_hides_inactive_by_default(self, client, admin_headers, user_headers):
        await _create(client, admin_headers, name="B", sort_order=1)
        await _create(client, admin_headers, name="A", sort_order=1)
        await _create(client, admin_headers, name="Z", sort_order=0)
        await _create(client, admin_headers, name="Old", is_active=False)

        response = await client.get(BASE, headers=user_headers)
        assert [t["name"] for t in response.json()["data"]] == ["Z", "A", "B"]

        response = await client.get(BASE, params={"active_only": "false"}, headers=user_headers)
        assert len(response.json()["data"]) == 4

    async def test_requires_manage_knowledge(self, client, user_headers):
        response = await client.post(BASE, json={"name": "x", "content": "y"}, headers=user_headers)

        assert response.status_code == 403
        assert response.json()["error"] == {
            "code": "AUTHORIZATION_ERROR",
            "message": "Requires capability MANAGE_KNOWLEDGE",
        }

    async def test_requires_authentication(self, client):
        response = await client.get(BASE)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    async def test_validation_error(self, client, admin_headers):
        response = await client.post(BASE, json={"name": "", "content": "y", "output_format": "xls"}, headers=admin_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert {d["field"] for d in error["details"]} == {"name", "output_format"}

    async def test_update_records_changes(self, client, admin_headers, session):
        created = await _create(client, admin_headers)

        response = await client.patch(
            f"{BASE}/{created['id']}", json={"name": "Security Brief", "output_format": "pdf"}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Security Brief"
        assert data["output_format"] == "pdf"
        assert data["content"] == created["content"]

        entry = (
            await session.execute(select(AuditLog).where(AuditLog.action == "UPDATED"))
        ).scalar_one()
        assert entry.changes["name"] == {"from": "Security Overview", "to": "Security Brief"}

    async def test_delete_and_missing(self, client, admin_headers):
        created = await _create(client, admin_headers)

        response = await client.delete(f"{BASE}/{created['id']}", headers=admin_headers)
        assert response.json() == {"data": {"deleted": True}, "pagination": None}

        response = await client.get(f"{BASE}/{created['id']}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Template not found"}


class TestFillTemplate:
    async def test_local_fill(self, client, admin_headers, fake_llm):
        customer = await client.post(
            "/api/v1/customers", json={"name": "Acme Bank", "overview": "Retail bank."}, headers=admin_headers
        )
        template = await _create(client, admin_headers)

        response = await client.post(
            f"{BASE}/fill",
            json={"template_id": template["id"], "customer_id": customer.json()["data"]["id"]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["filled_content"] == "# Acme Bank\n\n"
        assert data["placeholders_used"] == ["{{customer.name}}"]
        assert data["placeholders_missing"] == ["{{custom.tagline}}"]
        assert data["llm_generated_sections"] == []
        assert data["template"] == {"id": template["id"], "name": "Security Overview", "category": "security"}
        assert fake_llm.prompts == []

    async def test_llm_sections(self, client, admin_headers, fake_llm, session):
        fake_llm.reply = "# Acme\n\nAcme trusts us.\n"
        template = await _create(
            client, admin_headers, content="# {{custom.name}}\n\n{{llm:one line on why Acme trusts us}}"
        )

        response = await client.post(
            f"{BASE}/fill",
            json={
                "template_id": template["id"],
                "custom_values": {"name": "Acme"},
                "instructions": "Be brief.",
            },
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert data["filled_content"] == "# Acme\n\nAcme trusts us."
        assert data["llm_generated_sections"] == ["{{llm:one line on why Acme trusts us}}"]
        assert data["placeholders_used"] == ["{{custom.name}}"]

        prompt = fake_llm.prompts[-1]
        assert "1. {{llm:one line on why Acme trusts us}} - one line on why Acme trusts us" in prompt
        assert "## Additional Instructions\nBe brief." in prompt

        usage = (await session.execute(select(LlmUsage))).scalars().all()
        assert [u.feature for u in usage] == ["templates-fill"]

    async def test_unresolved_placeholders_in_llm_output_are_reported(self, client, admin_headers, fake_llm):
        fake_llm.reply = "Intro {{custom.unknown}}"
        template = await _create(client, admin_headers, content="{{llm:intro}}")

        response = await client.post(f"{BASE}/fill", json={"template_id": template["id"]}, headers=admin_headers)

        assert response.json()["data"]["placeholders_missing"] == ["{{custom.unknown}}"]

    async def test_inactive_template(self, client, admin_headers):
        template = await _create(client, admin_headers, is_active=False)

        response = await client.post(f"{BASE}/fill", json={"template_id": template["id"]}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Template is not active"

    async def test_unknown_template(self, client, user_headers):
        response = await client.post(f"{BASE}/fill", json={"template_id": "nope"}, headers=user_headers)
        assert response.status_code == 404
