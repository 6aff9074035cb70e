"""
Template entity models.

Templates are markdown documents containing ``{{type.field}}`` placeholders
that are filled from customer data, skills, GTM data, dates, custom values
or LLM generation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class TemplateBase(Base):
    """Base fields for a document template."""

    name: str = Field(max_length=200, index=True, description="Display name")
    description: Optional[str] = Field(default=None, max_length=1000, description="What the template is for")
    content: str = Field(sa_type=Text, description="Markdown body with placeholders")
    category: Optional[str] = Field(default=None, max_length=100, index=True, description="Grouping category")
    output_format: str = Field(default="markdown", max_length=16, description="markdown, docx or pdf")
    placeholder_hint: Optional[str] = Field(default=None, max_length=2000, description="Guidance for fillers")
    instruction_preset_id: Optional[str] = Field(default=None, max_length=64, description="Preset applied on fill")
    is_active: bool = Field(default=True, index=True)
    sort_order: int = Field(default=0)


class Template(TemplateBase, table=True):
    """Persistent document template.

    Table: tt_templates
    """

    __tablename__ = "tt_templates"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    created_by: Optional[str] = Field(default=None, max_length=255)
    updated_by: Optional[str] = Field(default=None, max_length=255)

    # Git mirror bookkeeping
    git_commit_sha: Optional[str] = Field(default=None, max_length=64)
    sync_status: Optional[str] = Field(default=None, max_length=16)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"Template(id={self.id}, name={self.name}, active={self.is_active})"
