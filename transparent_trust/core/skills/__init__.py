"""Skill refresh from source URLs and LLM-assisted merging."""

from .refresh import (
    DraftUpdate,
    MergedSkill,
    SkillRefreshError,
    SkillText,
    append_history,
    build_source_material,
    generate_draft_update,
    history_entry,
    mark_sources_fetched,
    merge_skills,
    source_url_strings,
)

__all__ = [
    "DraftUpdate",
    "MergedSkill",
    "SkillRefreshError",
    "SkillText",
    "append_history",
    "build_source_material",
    "generate_draft_update",
    "history_entry",
    "mark_sources_fetched",
    "merge_skills",
    "source_url_strings",
]
