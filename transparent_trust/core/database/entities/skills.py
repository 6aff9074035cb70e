"""
Skill entity models.

A skill is a knowledge snippet used to ground LLM answers. Skills can be
refreshed from their source URLs and are mirrored to git.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class Skill(Base, table=True):
    """Persistent knowledge skill.

    ``source_urls`` entries look like ``{url, added_at, last_fetched_at}``.

    Table: tt_skills
    """

    __tablename__ = "tt_skills"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    title: str = Field(max_length=500, index=True)
    content: str = Field(sa_type=Text)
    categories: List[str] = Field(default_factory=list, sa_type=JSON)
    quick_facts: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    edge_cases: List[str] = Field(default_factory=list, sa_type=JSON)
    source_urls: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    owners: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    history: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    is_active: bool = Field(default=True, index=True)
    status: str = Field(default="PUBLISHED", max_length=16, index=True)
    tier: Optional[str] = Field(default=None, max_length=32)
    last_refreshed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_by: Optional[str] = Field(default=None, max_length=255)

    # Git mirror bookkeeping
    git_commit_sha: Optional[str] = Field(default=None, max_length=64)
    sync_status: Optional[str] = Field(default=None, max_length=16)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"Skill(id={self.id}, title={self.title})"
