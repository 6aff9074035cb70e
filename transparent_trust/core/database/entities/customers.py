"""
Customer profile entity models.

A customer profile is the single source of customer context used when
filling templates and drafting answers. Profiles are mirrored to git as
markdown with YAML frontmatter.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class CustomerProfile(Base, table=True):
    """Persistent customer profile.

    ``history`` is an append-only list of ``{date, action, summary, user}``
    entries.

    Table: tt_customer_profiles
    """

    __tablename__ = "tt_customer_profiles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255, index=True)
    industry: Optional[str] = Field(default=None, max_length=255, index=True)
    website: Optional[str] = Field(default=None, max_length=2048)
    region: Optional[str] = Field(default=None, max_length=128)
    tier: Optional[str] = Field(default=None, max_length=64)

    # Narrative content
    overview: str = Field(sa_type=Text)
    products: Optional[str] = Field(default=None, sa_type=Text)
    challenges: Optional[str] = Field(default=None, sa_type=Text)
    content: Optional[str] = Field(default=None, sa_type=Text)

    # Structured content
    key_facts: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    tags: List[str] = Field(default_factory=list, sa_type=JSON)
    source_urls: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    considerations: List[str] = Field(default_factory=list, sa_type=JSON)
    owners: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    history: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    is_active: bool = Field(default=True, index=True)
    created_by: Optional[str] = Field(default=None, max_length=255)
    owner_id: Optional[str] = Field(default=None, max_length=64, index=True)

    # Git mirror bookkeeping
    git_commit_sha: Optional[str] = Field(default=None, max_length=64)
    sync_status: Optional[str] = Field(default=None, max_length=16)
    last_synced_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, index=True, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"CustomerProfile(id={self.id}, name={self.name})"
