"""Skill I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from transparent_trust.core.models.domain import SkillStatus
from transparent_trust.core.skills import DraftUpdate, SkillText


class SkillRead(BaseModel):
    """Schema for reading a skill from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    categories: List[str] = Field(default_factory=list)
    quick_facts: List[Dict[str, Any]] = Field(default_factory=list)
    edge_cases: List[str] = Field(default_factory=list)
    source_urls: List[Dict[str, Any]] = Field(default_factory=list)
    owners: List[Dict[str, Any]] = Field(default_factory=list)
    history: List[Dict[str, Any]] = Field(default_factory=list)
    is_active: bool
    status: str
    tier: Optional[str] = None
    last_refreshed_at: Optional[datetime] = None
    created_by: Optional[str] = None
    git_commit_sha: Optional[str] = None
    sync_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SkillSourceUrl(BaseModel):
    url: str = Field(min_length=1, max_length=2048)
    added_at: Optional[str] = None
    last_fetched_at: Optional[str] = None


class SkillCreate(BaseModel):
    """Schema for creating a skill via API."""

    title: str = Field(min_length=1, max_length=500)
    content: str = Field(min_length=1)
    categories: List[str] = Field(default_factory=list)
    quick_facts: List[Dict[str, Any]] = Field(default_factory=list)
    edge_cases: List[str] = Field(default_factory=list)
    source_urls: List[SkillSourceUrl] = Field(default_factory=list)
    owners: List[Dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True
    status: SkillStatus = SkillStatus.published
    tier: Optional[str] = Field(default=None, max_length=32)


class SkillUpdate(BaseModel):
    """Schema for updating a skill via API."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    content: Optional[str] = Field(default=None, min_length=1)
    categories: Optional[List[str]] = None
    quick_facts: Optional[List[Dict[str, Any]]] = None
    edge_cases: Optional[List[str]] = None
    source_urls: Optional[List[SkillSourceUrl]] = None
    owners: Optional[List[Dict[str, Any]]] = None
    is_active: Optional[bool] = None
    status: Optional[SkillStatus] = None
    tier: Optional[str] = Field(default=None, max_length=32)


class SkillRefreshResult(BaseModel):
    """Outcome of refreshing a skill from its sources.

    Without changes only ``message`` is set; otherwise the draft and the
    original text are returned for review.
    """

    has_changes: bool
    message: Optional[str] = None
    draft: Optional[DraftUpdate] = None
    original_title: Optional[str] = None
    original_content: Optional[str] = None


class SkillRefreshApply(BaseModel):
    """Accept a refresh draft."""

    title: Optional[str] = None
    content: Optional[str] = None
    change_highlights: List[str] = Field(default_factory=list)


class SkillMergeRequest(BaseModel):
    target_skill: Optional[SkillText] = None
    skills_to_merge: List[SkillText] = Field(default_factory=list)


class SkillHistoryCommit(BaseModel):
    sha: str
    author: str
    email: str
    date: str
    message: str
