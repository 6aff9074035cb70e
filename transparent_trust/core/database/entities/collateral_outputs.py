"""
Collateral output entity models.

A collateral output is a customer-facing document generated from a
template. It carries the shared review workflow columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, Text

from ..base import new_id, utc_now
from .reviewable import ReviewableFields


class CollateralOutput(ReviewableFields, table=True):
    """Persistent generated collateral.

    Table: tt_collateral_outputs
    """

    __tablename__ = "tt_collateral_outputs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    template_id: Optional[str] = Field(default=None, max_length=64, index=True)
    customer_id: Optional[str] = Field(default=None, max_length=64, index=True)
    owner_id: str = Field(max_length=64, index=True)
    status: str = Field(default="DRAFT", max_length=32, index=True)

    filled_content: Optional[str] = Field(default=None, sa_type=Text)
    generated_markdown: Optional[str] = Field(default=None, sa_type=Text)
    placeholders_used: List[str] = Field(default_factory=list, sa_type=JSON)
    output_format: str = Field(default="markdown", max_length=16)

    # Feedback
    rating: Optional[str] = Field(default=None, max_length=16)
    feedback_comment: Optional[str] = Field(default=None, sa_type=Text)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"CollateralOutput(id={self.id}, name={self.name}, status={self.status})"
