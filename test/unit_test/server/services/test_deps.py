"""Tests for identity, capability and rate limit dependencies."""

import pytest

from transparent_trust.core.database.entities.auth_group_mappings import AuthGroupMapping
from transparent_trust.core.rate_limit import RateLimitRule, rate_limiter
from transparent_trust.server.core.config import settings

TEMPLATES = "/api/v1/templates"
FILL = "/api/v1/templates/fill"


async def _add_mapping(session, group_id, capabilities, provider="okta", is_active=True):
    session.add(AuthGroupMapping(provider=provider, group_id=group_id, capabilities=capabilities, is_active=is_active))
    await session.commit()


class TestIdentity:
    async def test_missing_user_header(self, client):
        response = await client.get(TEMPLATES, headers={"x-user-role": "ADMIN"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Authentication required"

    async def test_role_is_case_insensitive(self, client, headers_for):
        response = await client.post(
            TEMPLATES, json={"name": "T", "content": "c"}, headers=headers_for("u-1", role="admin")
        )
        assert response.status_code == 201


class TestGroupCapabilities:
    async def test_active_group_mapping_grants_capability(self, client, session, headers_for):
        await _add_mapping(session, "tt-knowledge", ["MANAGE_KNOWLEDGE", "NOT_A_CAPABILITY"])
        headers = headers_for("u-1", role="USER", groups=["other", "tt-knowledge"])

        response = await client.post(TEMPLATES, json={"name": "T", "content": "c"}, headers=headers)

        assert response.status_code == 201

    async def test_inactive_mapping_is_ignored(self, client, session, headers_for):
        await _add_mapping(session, "tt-knowledge", ["MANAGE_KNOWLEDGE"], is_active=False)
        headers = headers_for("u-1", role="USER", groups=["tt-knowledge"])

        response = await client.post(TEMPLATES, json={"name": "T", "content": "c"}, headers=headers)

        assert response.status_code == 403

    async def test_provider_header_selects_mappings(self, client, session, headers_for):
        await _add_mapping(session, "knowledge", ["MANAGE_KNOWLEDGE"], provider="azure")
        headers = headers_for("u-1", role="USER", groups=["knowledge"])

        okta = await client.post(TEMPLATES, json={"name": "T", "content": "c"}, headers=headers)
        assert okta.status_code == 403

        azure = await client.post(
            TEMPLATES, json={"name": "T", "content": "c"}, headers={**headers, "x-auth-provider": "azure"}
        )
        assert azure.status_code == 201


class TestRateLimit:
    @pytest.fixture(autouse=True)
    def _tight_llm_limit(self, monkeypatch):
        monkeypatch.setattr(
            rate_limiter, "rules", {"llm": RateLimitRule(1, 60), "standard": RateLimitRule(100, 60)}
        )

    async def test_llm_limit_returns_429(self, client, user_headers):
        first = await client.post(FILL, json={"template_id": "missing"}, headers=user_headers)
        assert first.status_code == 404

        second = await client.post(FILL, json={"template_id": "missing"}, headers=user_headers)

        assert second.status_code == 429
        assert second.json()["error"] == {
            "code": "RATE_LIMITED",
            "message": "Too many requests. Please try again later.",
        }
        assert second.headers["X-RateLimit-Limit"] == "1"
        assert second.headers["X-RateLimit-Remaining"] == "0"
        assert 1 <= int(second.headers["Retry-After"]) <= 60

    async def test_limits_are_per_user(self, client, user_headers, admin_headers):
        await client.post(FILL, json={"template_id": "missing"}, headers=user_headers)

        response = await client.post(FILL, json={"template_id": "missing"}, headers=admin_headers)
        assert response.status_code == 404

    async def test_disabled(self, client, user_headers, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_enabled", False)

        for _ in range(3):
            response = await client.post(FILL, json={"template_id": "missing"}, headers=user_headers)
            assert response.status_code == 404
