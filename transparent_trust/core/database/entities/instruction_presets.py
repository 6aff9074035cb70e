"""
Instruction preset entity models.

Instruction presets are reusable prompt instructions. A preset starts
private to its creator and can be shared org-wide after approval by a
prompt admin.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class InstructionPreset(Base, table=True):
    """Persistent instruction preset.

    Table: tt_instruction_presets
    """

    __tablename__ = "tt_instruction_presets"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=200, index=True)
    description: Optional[str] = Field(default=None, max_length=1000)
    content: str = Field(sa_type=Text)

    # Sharing workflow
    share_status: str = Field(default="PRIVATE", max_length=32, index=True)
    is_shared: bool = Field(default=False, index=True)
    is_default: bool = Field(default=False)
    share_requested_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    approved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    approved_by: Optional[str] = Field(default=None, max_length=255)
    rejected_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    rejected_by: Optional[str] = Field(default=None, max_length=255)
    rejection_reason: Optional[str] = Field(default=None, sa_type=Text)

    created_by: Optional[str] = Field(default=None, max_length=64, index=True)
    created_by_email: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"InstructionPreset(id={self.id}, name={self.name}, share_status={self.share_status})"
