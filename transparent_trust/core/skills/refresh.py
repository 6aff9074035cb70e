"""
Skill refresh and merge.

A refresh re-reads a skill's source URLs and asks the LLM for a
diff-friendly draft update; the draft is returned for review and only
applied once a user accepts it. A merge consolidates several skills into
one document.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import AliasChoices, BaseModel, Field

from transparent_trust.core.database.base import utc_now
from transparent_trust.core.http_fetch import fetch_url_content
from transparent_trust.core.llm import LLMService
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import CurrentUser, HistoryAction
from transparent_trust.core.prompts import load_system_prompt

logger = get_logger(__name__)

SOURCE_SEPARATOR = "\n\n---\n\n"
PER_SOURCE_LIMIT = 20000
TOTAL_SOURCE_LIMIT = 100000
REFRESH_TEMPERATURE = 0.1
REFRESH_MAX_TOKENS = 16000

Fetcher = Callable[..., Awaitable[Optional[str]]]


class SkillRefreshError(Exception):
    """Raised when a skill cannot be refreshed or merged."""


class SkillText(BaseModel):
    title: str
    content: str


class DraftUpdate(BaseModel):
    """LLM-proposed update of a skill, pending user review."""

    has_changes: bool = Field(default=False, validation_alias=AliasChoices("has_changes", "hasChanges"))
    summary: str = Field(default="")
    title: str = Field(default="")
    content: str = Field(default="")
    change_highlights: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("change_highlights", "changeHighlights")
    )


class MergedSkill(BaseModel):
    title: str
    content: str


async def build_source_material(urls: Sequence[str], fetcher: Fetcher = fetch_url_content) -> str:
    """
    Fetch every source URL concurrently and join the results.

    Each source is capped at 20000 characters and rendered as
    ``Source: <url>`` followed by its text; the combined material is
    capped at 100000 characters.

    Raises:
        SkillRefreshError: None of the URLs returned content.
    """
    results = await asyncio.gather(*(fetcher(url, max_length=PER_SOURCE_LIMIT) for url in urls))
    sections = [f"Source: {url}\n{text}" for url, text in zip(urls, results) if text]
    if not sections:
        raise SkillRefreshError("Unable to load any content from the source URLs.")
    return SOURCE_SEPARATOR.join(sections).strip()[:TOTAL_SOURCE_LIMIT]


def _text_of(skill: Any) -> SkillText:
    if isinstance(skill, Mapping):
        return SkillText(title=skill.get("title", ""), content=skill.get("content", ""))
    return SkillText(title=skill.title, content=skill.content)


_REFRESH_FALLBACK_PROMPT = (
    "You are a knowledge extraction specialist reviewing an existing skill against refreshed source material. "
    'Return ONLY a JSON object with "hasChanges", "summary", "title", "content" and "changeHighlights".'
)

_MERGE_FALLBACK_PROMPT = "You are a knowledge management expert."

_MERGE_TASK = """
Your task is to merge the provided skills into a single, well-organized document.

- Remove duplicate information
- Organize content logically with clear sections
- Preserve all unique, valuable information from each skill
- Use markdown headers (##, ###) to organize sections

Return ONLY a JSON object with "title" and "content" fields."""


async def generate_draft_update(
    llm: LLMService,
    skill: Any,
    material: str,
    urls: Sequence[str],
    user: Optional[CurrentUser] = None,
) -> DraftUpdate:
    """Ask the LLM whether the refreshed material adds anything to ``skill``."""
    existing = _text_of(skill)
    system_prompt = await load_system_prompt(llm.session, "skill_refresh", _REFRESH_FALLBACK_PROMPT)
    url_line = f"\nSource URLs: {', '.join(urls)}" if urls else ""
    user_prompt = f"""EXISTING SKILL:
Title: {existing.title}

Current Content:
{existing.content}

---

REFRESHED SOURCE MATERIAL:
{material}
{url_line}

---

Review the refreshed source material against the existing skill.
- If there is significant new or changed information, return an updated draft with hasChanges=true
- If the source is the same or does not add value, return hasChanges=false

Return ONLY the JSON object."""

    try:
        parsed = await llm.complete_json(
            system_prompt,
            user_prompt,
            temperature=REFRESH_TEMPERATURE,
            max_tokens=REFRESH_MAX_TOKENS,
            feature="skills-refresh",
            user=user,
        )
    except ValueError as e:
        raise SkillRefreshError(f"Failed to parse draft update: {e}") from e
    return DraftUpdate.model_validate(parsed)


async def merge_skills(
    llm: LLMService,
    target: Any,
    others: Sequence[Any],
    user: Optional[CurrentUser] = None,
) -> MergedSkill:
    """Merge ``others`` into ``target`` with the LLM.

    Raises:
        SkillRefreshError: Nothing to merge, or the reply was not usable.
    """
    if not others:
        raise SkillRefreshError("No skills to merge")

    all_skills = [_text_of(target), *(_text_of(s) for s in others)]
    skills_content = SOURCE_SEPARATOR.join(
        f'=== SKILL {i}: "{s.title}" ===\n{s.content}' for i, s in enumerate(all_skills, start=1)
    )
    system_prompt = await load_system_prompt(llm.session, "skill_organize", _MERGE_FALLBACK_PROMPT)
    user_prompt = (
        f"Please merge the following {len(all_skills)} skills into one comprehensive document:\n\n"
        f"{skills_content}\n\n"
        "Merge these into a single, well-organized skill document. Remove duplicates, organize logically, "
        "and preserve all unique information.\n\nReturn ONLY the JSON object."
    )

    try:
        parsed = await llm.complete_json(
            system_prompt + _MERGE_TASK,
            user_prompt,
            temperature=REFRESH_TEMPERATURE,
            max_tokens=REFRESH_MAX_TOKENS,
            feature="skills-merge",
            user=user,
        )
    except ValueError as e:
        raise SkillRefreshError(f"Failed to parse merged skill: {e}") from e

    if not parsed.get("title") or not parsed.get("content"):
        raise SkillRefreshError("Merged skill is missing a title or content")
    return MergedSkill(title=str(parsed["title"]), content=str(parsed["content"]))


def history_entry(
    action: HistoryAction | str,
    summary: str,
    user: Optional[CurrentUser] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build a ``{date, action, summary, user}`` history entry."""
    entry: Dict[str, Any] = {
        "date": (now or utc_now()).isoformat(),
        "action": HistoryAction(action).value,
        "summary": summary,
    }
    if user is not None:
        entry["user"] = user.email or user.label
    return entry


def append_history(history: Optional[List[Dict[str, Any]]], entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return a new history list with ``entry`` appended."""
    return [*(history or []), entry]


def mark_sources_fetched(
    source_urls: Optional[List[Dict[str, Any]]], now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """Return copies of the source URL entries stamped with ``last_fetched_at``."""
    stamp = (now or utc_now()).isoformat()
    return [{**source, "last_fetched_at": stamp} for source in source_urls or []]


def source_url_strings(source_urls: Optional[List[Dict[str, Any]]]) -> List[str]:
    return [s["url"] for s in source_urls or [] if s.get("url")]
