"""Unit tests for prompt providers and system prompt composition."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from transparent_trust.core.database.entities.prompt_blocks import PromptBlockOverride
from transparent_trust.core.prompts import (
    BuiltinPromptProvider,
    DatabasePromptProvider,
    PromptBlock,
    PromptComposition,
    PromptProvider,
    StackedPromptProvider,
    build_prompt_from_blocks,
    compose_prompt,
    load_system_prompt,
    render_prompt,
)


class TestPromptBlock:
    def test_text_for_falls_back_to_default(self):
        block = PromptBlock(id="b", name="B", variants={"default": "base", "x": "special"})
        assert block.text_for("x") == "special"
        assert block.text_for("y") == "base"

    def test_text_for_without_default(self):
        assert PromptBlock(id="b", name="B").text_for("y") == ""


class TestBuiltinProvider:
    def test_is_a_prompt_provider(self):
        assert isinstance(BuiltinPromptProvider(), PromptProvider)

    def test_get_by_name_and_context(self):
        provider = BuiltinPromptProvider()
        assert provider.get("role_mission") == "You are a helpful assistant."
        assert "knowledge extraction specialist" in provider.get("role_mission/skill_refresh")

    def test_unknown_names_raise_key_error(self):
        provider = BuiltinPromptProvider()
        with pytest.raises(KeyError):
            provider.get("nope")
        with pytest.raises(KeyError):
            provider.get("quality_rules/skill_refresh")

    def test_version(self):
        assert BuiltinPromptProvider(version_id="v9").version() == "v9"


class TestComposition:
    def test_blocks_rendered_in_composition_order(self):
        blocks = [
            PromptBlock(id="a", name="Alpha", variants={"default": "first"}),
            PromptBlock(id="b", name="Beta", variants={"default": "second", "ctx": "   "}),
            PromptBlock(id="c", name="Gamma", variants={"ctx": "third"}),
        ]
        composition = PromptComposition(context="ctx", block_ids=["c", "missing", "b", "a"])

        assert build_prompt_from_blocks(blocks, composition) == "## Gamma\nthird\n\n## Alpha\nfirst"

    def test_compose_skill_refresh(self):
        prompt = compose_prompt(BuiltinPromptProvider(), "skill_refresh")

        assert prompt.startswith("## Role & Mission\n")
        assert "## Processing Guidelines" in prompt
        assert '"hasChanges": true/false' in prompt

    def test_compose_unknown_context(self):
        assert compose_prompt(BuiltinPromptProvider(), "unknown") == ""

    def test_render_prompt(self):
        text = "Hello {{ name }}, {{missing}} {{empty}}"
        assert render_prompt(text, {"name": "Dana", "empty": None}) == "Hello Dana, {{missing}} {{empty}}"


class TestOverrides:
    def _override(self, **kwargs):
        return PromptBlockOverride(block_id="output_format", **kwargs)

    def test_database_provider_version(self):
        assert DatabasePromptProvider().version() == "db:0:none"
        provider = DatabasePromptProvider([self._override(variants={"default": "x"})])
        assert provider.version().startswith("db:1:")

    def test_stacked_merges_variants(self):
        overrides = DatabasePromptProvider(
            [self._override(name="Response Format", variants={"template_fill": "Return HTML."})]
        )
        stacked = StackedPromptProvider(overrides, BuiltinPromptProvider())

        block = stacked.get_block("output_format")
        assert block.name == "Response Format"
        assert block.variants["template_fill"] == "Return HTML."
        assert block.variants["default"] == "Provide a clear, structured response."
        assert stacked.get("role_mission") == "You are a helpful assistant."

    def test_stacked_serves_primary_only_blocks(self):
        overrides = DatabasePromptProvider(
            [PromptBlockOverride(block_id="extra", name="Extra", variants={"default": "more"})]
        )
        stacked = StackedPromptProvider(overrides, BuiltinPromptProvider())
        assert stacked.get("extra") == "more"
        assert stacked.version().startswith("stacked:db:1:")


class TestLoadSystemPrompt:
    async def test_unknown_key_returns_fallback(self):
        assert await load_system_prompt(None, "no_such_feature", "FALLBACK") == "FALLBACK"

    async def test_builtin_without_session(self):
        prompt = await load_system_prompt(None, "templates", "FALLBACK")
        assert "sales enablement writer" in prompt
        assert "Return ONLY the complete filled template" in prompt

    async def test_database_override_wins(self, in_memory_session):
        in_memory_session.add(
            PromptBlockOverride(block_id="output_format", variants={"template_fill": "Answer in haiku."})
        )
        await in_memory_session.commit()

        prompt = await load_system_prompt(in_memory_session, "template_fill", "FALLBACK")

        assert "Answer in haiku." in prompt
        assert "Return ONLY the complete filled template" not in prompt

    async def test_override_load_failure_uses_builtin(self):
        session = MagicMock()
        session.execute = AsyncMock(side_effect=RuntimeError("no table"))
        session.rollback = AsyncMock()

        prompt = await load_system_prompt(session, "skill_refresh", "FALLBACK")

        assert "knowledge extraction specialist" in prompt
        session.rollback.assert_awaited_once()
