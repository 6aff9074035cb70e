"""
Prompt block override entity models.

Stores admin edits to the builtin prompt blocks. A row overrides the
builtin block with the same ``block_id``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class PromptBlockOverride(Base, table=True):
    """Persistent prompt block override.

    Table: tt_prompt_blocks
    """

    __tablename__ = "tt_prompt_blocks"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    block_id: str = Field(max_length=128, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    variants: Dict[str, str] = Field(default_factory=dict, sa_type=JSON)
    updated_by: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )
