"""Initial schema and seed data for Transparent Trust

Revision ID: 20261001_000000
Revises: None
Create Date: 2026-10-01 00:00:00.000000

This is the initial migration that creates all tables and seeds default data
for the Transparent Trust service. This includes:
- Knowledge tables (templates, customer profiles, skills, instruction presets, prompt blocks)
- Work tables (bulk projects and rows, collateral outputs)
- Governance tables (auth group mappings, audit log, LLM usage)
- Default SSO group mappings

Revision format: YYYYMMDD_HHMMSS_description

"""

import uuid
from datetime import datetime, timezone
from typing import List, Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261001_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _git_sync_columns() -> List[sa.Column]:
    return [
        sa.Column("git_commit_sha", sa.String(64), nullable=True),
        sa.Column("sync_status", sa.String(16), nullable=True),
    ]


def _reviewable_columns() -> List[sa.Column]:
    """Flag, queue and review columns shared by rows and collateral."""
    return [
        sa.Column("flagged_for_review", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("flagged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("flagged_by", sa.String(255), nullable=True),
        sa.Column("flag_note", sa.Text(), nullable=True),
        sa.Column("flag_resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("flag_resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("flag_resolved_by", sa.String(255), nullable=True),
        sa.Column("flag_resolution_note", sa.Text(), nullable=True),
        sa.Column("queued_for_review", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("queued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("queued_by", sa.String(255), nullable=True),
        sa.Column("queued_note", sa.Text(), nullable=True),
        sa.Column("queued_reviewer_id", sa.String(64), nullable=True),
        sa.Column("queued_reviewer_name", sa.String(255), nullable=True),
        sa.Column("review_status", sa.String(16), nullable=False, server_default="NONE"),
        sa.Column("review_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_requested_by", sa.String(255), nullable=True),
        sa.Column("review_note", sa.Text(), nullable=True),
        sa.Column("assigned_reviewer_id", sa.String(64), nullable=True),
        sa.Column("assigned_reviewer_name", sa.String(255), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
    ]


def _reviewable_indexes(table: str) -> List[sa.Index]:
    return [
        sa.Index(f"ix_{table}_flagged_for_review", "flagged_for_review"),
        sa.Index(f"ix_{table}_review_status", "review_status"),
        sa.Index(f"ix_{table}_review_requested_at", "review_requested_at"),
        sa.Index(f"ix_{table}_assigned_reviewer_id", "assigned_reviewer_id"),
    ]


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Create tt_templates table
    op.create_table(
        "tt_templates",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("output_format", sa.String(16), nullable=False, server_default="markdown"),
        sa.Column("placeholder_hint", sa.String(2000), nullable=True),
        sa.Column("instruction_preset_id", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("updated_by", sa.String(255), nullable=True),
        *_git_sync_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_templates_name", "name"),
        sa.Index("ix_tt_templates_category", "category"),
        sa.Index("ix_tt_templates_is_active", "is_active"),
    )

    # Create tt_customer_profiles table
    op.create_table(
        "tt_customer_profiles",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("industry", sa.String(255), nullable=True),
        sa.Column("website", sa.String(2048), nullable=True),
        sa.Column("region", sa.String(128), nullable=True),
        sa.Column("tier", sa.String(64), nullable=True),
        sa.Column("overview", sa.Text(), nullable=False),
        sa.Column("products", sa.Text(), nullable=True),
        sa.Column("challenges", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("key_facts", JSONB(), nullable=False, server_default="[]"),
        sa.Column("tags", JSONB(), nullable=False, server_default="[]"),
        sa.Column("source_urls", JSONB(), nullable=False, server_default="[]"),
        sa.Column("considerations", JSONB(), nullable=False, server_default="[]"),
        sa.Column("owners", JSONB(), nullable=False, server_default="[]"),
        sa.Column("history", JSONB(), nullable=False, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("owner_id", sa.String(64), nullable=True),
        *_git_sync_columns(),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_customer_profiles_name", "name"),
        sa.Index("ix_tt_customer_profiles_industry", "industry"),
        sa.Index("ix_tt_customer_profiles_is_active", "is_active"),
        sa.Index("ix_tt_customer_profiles_owner_id", "owner_id"),
        sa.Index("ix_tt_customer_profiles_updated_at", "updated_at"),
    )

    # Create tt_skills table
    op.create_table(
        "tt_skills",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("categories", JSONB(), nullable=False, server_default="[]"),
        sa.Column("quick_facts", JSONB(), nullable=False, server_default="[]"),
        sa.Column("edge_cases", JSONB(), nullable=False, server_default="[]"),
        sa.Column("source_urls", JSONB(), nullable=False, server_default="[]"),
        sa.Column("owners", JSONB(), nullable=False, server_default="[]"),
        sa.Column("history", JSONB(), nullable=False, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(16), nullable=False, server_default="PUBLISHED"),
        sa.Column("tier", sa.String(32), nullable=True),
        sa.Column("last_refreshed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        *_git_sync_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_skills_title", "title"),
        sa.Index("ix_tt_skills_is_active", "is_active"),
        sa.Index("ix_tt_skills_status", "status"),
    )

    # Create tt_instruction_presets table
    op.create_table(
        "tt_instruction_presets",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("share_status", sa.String(32), nullable=False, server_default="PRIVATE"),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("share_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", sa.String(255), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_by_email", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_instruction_presets_name", "name"),
        sa.Index("ix_tt_instruction_presets_share_status", "share_status"),
        sa.Index("ix_tt_instruction_presets_is_shared", "is_shared"),
        sa.Index("ix_tt_instruction_presets_created_by", "created_by"),
    )

    # Create tt_prompt_blocks table
    op.create_table(
        "tt_prompt_blocks",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("block_id", sa.String(128), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("variants", JSONB(), nullable=False, server_default="{}"),
        sa.Column("updated_by", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("block_id", name="uq_tt_prompt_blocks_block_id"),
    )

    # Create tt_bulk_projects table
    op.create_table(
        "tt_bulk_projects",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sheet_name", sa.String(255), nullable=True),
        sa.Column("columns", JSONB(), nullable=False, server_default="[]"),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("customer_id", sa.String(64), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="DRAFT"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_bulk_projects_owner_id", "owner_id"),
        sa.Index("ix_tt_bulk_projects_customer_id", "customer_id"),
        sa.Index("ix_tt_bulk_projects_status", "status"),
    )

    # Create tt_bulk_rows table
    op.create_table(
        "tt_bulk_rows",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("project_id", sa.String(64), nullable=False),
        sa.Column("row_number", sa.Integer(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("response", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("confidence", sa.String(32), nullable=True),
        sa.Column("user_edited_answer", sa.Text(), nullable=True),
        sa.Column("original_response", sa.Text(), nullable=True),
        sa.Column("original_confidence", sa.String(32), nullable=True),
        sa.Column("clarify_conversation", JSONB(), nullable=False, server_default="[]"),
        *_reviewable_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_bulk_rows_project_id", "project_id"),
        *_reviewable_indexes("tt_bulk_rows"),
    )

    # Create tt_collateral_outputs table
    op.create_table(
        "tt_collateral_outputs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("template_id", sa.String(64), nullable=True),
        sa.Column("customer_id", sa.String(64), nullable=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="DRAFT"),
        sa.Column("filled_content", sa.Text(), nullable=True),
        sa.Column("generated_markdown", sa.Text(), nullable=True),
        sa.Column("placeholders_used", JSONB(), nullable=False, server_default="[]"),
        sa.Column("output_format", sa.String(16), nullable=False, server_default="markdown"),
        sa.Column("rating", sa.String(16), nullable=True),
        sa.Column("feedback_comment", sa.Text(), nullable=True),
        *_reviewable_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_collateral_outputs_template_id", "template_id"),
        sa.Index("ix_tt_collateral_outputs_customer_id", "customer_id"),
        sa.Index("ix_tt_collateral_outputs_owner_id", "owner_id"),
        sa.Index("ix_tt_collateral_outputs_status", "status"),
        *_reviewable_indexes("tt_collateral_outputs"),
    )

    # Create tt_auth_group_mappings table
    op.create_table(
        "tt_auth_group_mappings",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("provider", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(255), nullable=False),
        sa.Column("group_name", sa.String(255), nullable=True),
        sa.Column("capabilities", JSONB(), nullable=False, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider", "group_id", name="uq_tt_auth_group_mappings_provider_group"),
        sa.Index("ix_tt_auth_group_mappings_provider", "provider"),
    )

    # Create tt_audit_logs table
    op.create_table(
        "tt_audit_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("entity_title", sa.String(500), nullable=True),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("changes", JSONB(), nullable=True),
        sa.Column("details", JSONB(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_audit_logs_entity_type", "entity_type"),
        sa.Index("ix_tt_audit_logs_entity_id", "entity_id"),
        sa.Index("ix_tt_audit_logs_action", "action"),
        sa.Index("ix_tt_audit_logs_user_id", "user_id"),
        sa.Index("ix_tt_audit_logs_created_at", "created_at"),
    )

    # Create tt_llm_usage table
    op.create_table(
        "tt_llm_usage",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("feature", sa.String(64), nullable=False),
        sa.Column("provider", sa.String(64), nullable=False),
        sa.Column("model", sa.String(128), nullable=False),
        sa.Column("input_tokens", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("output_tokens", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_tokens", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("details", JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_tt_llm_usage_user_id", "user_id"),
        sa.Index("ix_tt_llm_usage_feature", "feature"),
        sa.Index("ix_tt_llm_usage_model", "model"),
        sa.Index("ix_tt_llm_usage_created_at", "created_at"),
    )

    # Seed default SSO group mappings
    now = datetime.now(timezone.utc)
    all_capabilities = [
        "ASK_QUESTIONS",
        "CREATE_PROJECTS",
        "REVIEW_ANSWERS",
        "MANAGE_KNOWLEDGE",
        "MANAGE_PROMPTS",
        "VIEW_ORG_DATA",
        "MANAGE_USERS",
        "ADMIN",
    ]
    default_group_mappings = [
        ("tt-users", "Copilot Users", ["ASK_QUESTIONS", "CREATE_PROJECTS"]),
        ("tt-reviewers", "Copilot Reviewers", ["ASK_QUESTIONS", "CREATE_PROJECTS", "REVIEW_ANSWERS", "VIEW_ORG_DATA"]),
        (
            "tt-knowledge-admins",
            "Knowledge Admins",
            ["ASK_QUESTIONS", "CREATE_PROJECTS", "REVIEW_ANSWERS", "VIEW_ORG_DATA", "MANAGE_KNOWLEDGE"],
        ),
        ("tt-prompt-admins", "Prompt Admins", ["ASK_QUESTIONS", "CREATE_PROJECTS", "MANAGE_PROMPTS"]),
        ("tt-admins", "Copilot Admins", all_capabilities),
    ]

    mappings_table = sa.table(
        "tt_auth_group_mappings",
        sa.column("id", sa.String),
        sa.column("provider", sa.String),
        sa.column("group_id", sa.String),
        sa.column("group_name", sa.String),
        sa.column("capabilities", JSONB),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime(timezone=True)),
        sa.column("updated_at", sa.DateTime(timezone=True)),
    )
    op.bulk_insert(
        mappings_table,
        [
            {
                "id": str(uuid.uuid4()),
                "provider": "okta",
                "group_id": group_id,
                "group_name": group_name,
                "capabilities": capabilities,
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
            for group_id, group_name, capabilities in default_group_mappings
        ],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("tt_llm_usage")
    op.drop_table("tt_audit_logs")
    op.drop_table("tt_auth_group_mappings")
    op.drop_table("tt_collateral_outputs")
    op.drop_table("tt_bulk_rows")
    op.drop_table("tt_bulk_projects")
    op.drop_table("tt_prompt_blocks")
    op.drop_table("tt_instruction_presets")
    op.drop_table("tt_skills")
    op.drop_table("tt_customer_profiles")
    op.drop_table("tt_templates")
