"""Unit tests for skill refresh and merge helpers."""

import json
from datetime import datetime
from typing import List

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from transparent_trust.core.database.entities.skills import Skill
from transparent_trust.core.llm import LLMService
from transparent_trust.core.models.domain import CurrentUser
from transparent_trust.core.skills import (
    DraftUpdate,
    SkillRefreshError,
    append_history,
    build_source_material,
    generate_draft_update,
    history_entry,
    mark_sources_fetched,
    merge_skills,
    source_url_strings,
)

NOW = datetime(2024, 5, 1, 8, 30)


def scripted_llm(reply: str, prompts: List[str]) -> LLMService:
    def _respond(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        for message in messages:
            for part in message.parts:
                if part.part_kind in ("system-prompt", "user-prompt"):
                    prompts.append(str(part.content))
        return ModelResponse(parts=[TextPart(reply)])

    return LLMService(model=FunctionModel(_respond))


class TestSourceMaterial:
    async def test_joins_sources_and_skips_failures(self):
        pages = {"https://a.example/doc": "Alpha text", "https://c.example/doc": "Gamma text"}
        calls = []

        async def fetcher(url, max_length):
            calls.append((url, max_length))
            return pages.get(url)

        material = await build_source_material(
            ["https://a.example/doc", "https://b.example/doc", "https://c.example/doc"], fetcher
        )

        assert material == (
            "Source: https://a.example/doc\nAlpha text\n\n---\n\nSource: https://c.example/doc\nGamma text"
        )
        assert all(limit == 20000 for _, limit in calls)

    async def test_total_material_is_capped(self):
        async def fetcher(url, max_length):
            return "y" * max_length

        material = await build_source_material([f"https://{i}.example" for i in range(8)], fetcher)
        assert len(material) == 100000

    async def test_no_content_at_all(self):
        async def fetcher(url, max_length):
            return None

        with pytest.raises(SkillRefreshError, match="Unable to load any content"):
            await build_source_material(["https://a.example"], fetcher)


class TestDraftUpdate:
    async def test_parses_camel_case_reply(self):
        prompts: List[str] = []
        reply = json.dumps(
            {
                "hasChanges": True,
                "summary": "Added SCIM",
                "title": "SSO",
                "content": "SAML and SCIM",
                "changeHighlights": ["Added SCIM provisioning"],
            }
        )
        llm = scripted_llm(f"```json\n{reply}\n```", prompts)
        skill = Skill(title="SSO", content="SAML only")

        draft = await generate_draft_update(llm, skill, "Source: x\nSCIM is supported", ["https://x.example"])

        assert draft == DraftUpdate(
            has_changes=True,
            summary="Added SCIM",
            title="SSO",
            content="SAML and SCIM",
            change_highlights=["Added SCIM provisioning"],
        )
        user_prompt = prompts[-1]
        assert "Title: SSO" in user_prompt
        assert "SAML only" in user_prompt
        assert "Source URLs: https://x.example" in user_prompt

    async def test_no_changes(self):
        llm = scripted_llm('{"hasChanges": false, "summary": "Up to date"}', [])
        draft = await generate_draft_update(llm, {"title": "SSO", "content": "SAML"}, "material", [])
        assert draft.has_changes is False
        assert draft.change_highlights == []

    async def test_unparseable_reply(self):
        llm = scripted_llm("Sorry, I can't do that.", [])
        with pytest.raises(SkillRefreshError, match="Failed to parse draft update"):
            await generate_draft_update(llm, {"title": "SSO", "content": "SAML"}, "material", [])


class TestMergeSkills:
    async def test_merge(self):
        prompts: List[str] = []
        llm = scripted_llm('{"title": "Identity", "content": "SSO and SCIM"}', prompts)

        merged = await merge_skills(
            llm,
            {"title": "SSO", "content": "SAML"},
            [Skill(title="SCIM", content="Provisioning")],
        )

        assert merged.title == "Identity"
        assert merged.content == "SSO and SCIM"
        assert '=== SKILL 1: "SSO" ===\nSAML' in prompts[-1]
        assert '=== SKILL 2: "SCIM" ===\nProvisioning' in prompts[-1]
        assert "merge the following 2 skills" in prompts[-1]

    async def test_nothing_to_merge(self):
        with pytest.raises(SkillRefreshError, match="No skills to merge"):
            await merge_skills(scripted_llm("{}", []), {"title": "a", "content": "b"}, [])

    async def test_incomplete_reply(self):
        llm = scripted_llm('{"title": "Identity"}', [])
        with pytest.raises(SkillRefreshError, match="missing a title or content"):
            await merge_skills(llm, {"title": "a", "content": "b"}, [{"title": "c", "content": "d"}])


class TestHistoryHelpers:
    def test_history_entry(self):
        user = CurrentUser(id="u-1", email="dana@example.com")
        assert history_entry("refreshed", "Refreshed from sources", user, now=NOW) == {
            "date": "2024-05-01T08:30:00",
            "action": "refreshed",
            "summary": "Refreshed from sources",
            "user": "dana@example.com",
        }
        assert "user" not in history_entry("created", "Skill created", now=NOW)

    def test_invalid_history_action(self):
        with pytest.raises(ValueError):
            history_entry("exploded", "nope")

    def test_append_history_returns_new_list(self):
        history = [{"action": "created"}]
        updated = append_history(history, {"action": "updated"})

        assert updated == [{"action": "created"}, {"action": "updated"}]
        assert history == [{"action": "created"}]
        assert append_history(None, {"action": "created"}) == [{"action": "created"}]

    def test_mark_sources_fetched(self):
        sources = [{"url": "https://a.example", "added_at": "2024-01-01"}]
        stamped = mark_sources_fetched(sources, now=NOW)

        assert stamped == [
            {"url": "https://a.example", "added_at": "2024-01-01", "last_fetched_at": "2024-05-01T08:30:00"}
        ]
        assert "last_fetched_at" not in sources[0]

    def test_source_url_strings(self):
        assert source_url_strings([{"url": "https://a.example"}, {"title": "no url"}, {"url": ""}]) == [
            "https://a.example"
        ]
        assert source_url_strings(None) == []
