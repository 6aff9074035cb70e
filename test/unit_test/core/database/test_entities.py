"""Unit tests for entity defaults and persistence of JSON columns."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import SQLModel, select

from transparent_trust.core.database import as_utc, utc_now
from transparent_trust.core.database.entities.collateral_outputs import CollateralOutput
from transparent_trust.core.database.entities.llm_usage import LlmUsage
from transparent_trust.core.database.entities.projects import BulkRow
from transparent_trust.core.database.entities.skills import Skill


class TestSkill:
    def test_defaults(self):
        skill = Skill(title="SSO", content="SAML")

        assert skill.id
        assert skill.is_active is True
        assert skill.status == "PUBLISHED"
        assert skill.categories == []
        assert skill.history == []
        assert skill.sync_status is None
        assert repr(skill) == f"Skill(id={skill.id}, title=SSO)"

    def test_ids_are_unique(self):
        assert Skill(title="a", content="b").id != Skill(title="a", content="b").id

    async def test_json_columns_round_trip(self, in_memory_session):
        skill = Skill(
            title="SSO",
            content="SAML",
            categories=["security"],
            source_urls=[{"url": "https://a.example", "added_at": "2024-01-01T00:00:00"}],
        )
        in_memory_session.add(skill)
        await in_memory_session.commit()

        stored = (await in_memory_session.execute(select(Skill))).scalar_one()
        assert stored.categories == ["security"]
        assert stored.source_urls[0]["url"] == "https://a.example"


class TestReviewableDefaults:
    def test_row_starts_outside_the_workflow(self):
        row = BulkRow(project_id="p-1", row_number=1, question="SSO?")

        assert row.review_status == "NONE"
        assert row.flagged_for_review is False
        assert row.queued_for_review is False
        assert row.flag_resolved is False

    def test_collateral_shares_workflow_columns(self):
        output = CollateralOutput(name="Deck", owner_id="u-1")

        assert output.status == "DRAFT"
        assert output.review_status == "NONE"
        assert output.placeholders_used == []


def test_llm_usage_repr():
    usage = LlmUsage(feature="templates-fill", provider="anthropic", model="claude", total_tokens=42)
    assert repr(usage) == "LlmUsage(feature=templates-fill, model=claude, total_tokens=42)"


class TestTimestamps:
    def test_every_timestamp_column_is_timezone_aware(self):
        columns = [
            (table.name, column)
            for table in SQLModel.metadata.tables.values()
            if table.name.startswith("tt_")
            for column in table.columns
            if column.name.endswith("_at")
        ]

        assert columns
        for table_name, column in columns:
            assert isinstance(column.type, DateTime), f"{table_name}.{column.name}"
            assert column.type.timezone is True, f"{table_name}.{column.name}"

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is timezone.utc
        assert as_utc(datetime(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def test_insert_and_update_with_aware_timestamps(self, in_memory_session):
        output = CollateralOutput(name="Deck", owner_id="u-1")
        created = output.created_at
        in_memory_session.add(output)
        await in_memory_session.commit()

        output.reviewed_at = utc_now()
        output.review_status = "APPROVED"
        await in_memory_session.commit()
        await in_memory_session.refresh(output)

        assert as_utc(output.created_at) == created
        assert output.reviewed_at is not None
        assert as_utc(output.updated_at) >= created
