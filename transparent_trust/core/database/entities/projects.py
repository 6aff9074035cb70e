"""
Bulk project entity models.

A bulk project is an imported RFP questionnaire; each question becomes a
row whose generated answer goes through the review workflow.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now
from .reviewable import ReviewableFields


class BulkProject(Base, table=True):
    """Persistent bulk RFP project.

    Table: tt_bulk_projects
    """

    __tablename__ = "tt_bulk_projects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    sheet_name: Optional[str] = Field(default=None, max_length=255)
    columns: List[str] = Field(default_factory=list, sa_type=JSON)
    owner_id: str = Field(max_length=64, index=True)
    customer_id: Optional[str] = Field(default=None, max_length=64, index=True)
    customer_name: Optional[str] = Field(default=None, max_length=255)
    status: str = Field(default="DRAFT", max_length=32, index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"BulkProject(id={self.id}, name={self.name}, status={self.status})"


class BulkRow(ReviewableFields, table=True):
    """One question/answer row of a bulk project.

    Table: tt_bulk_rows
    """

    __tablename__ = "tt_bulk_rows"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    project_id: str = Field(max_length=64, index=True)
    row_number: int = Field()
    question: str = Field(sa_type=Text)
    response: Optional[str] = Field(default=None, sa_type=Text)
    status: str = Field(default="PENDING", max_length=16)
    confidence: Optional[str] = Field(default=None, max_length=32)
    user_edited_answer: Optional[str] = Field(default=None, sa_type=Text)
    original_response: Optional[str] = Field(default=None, sa_type=Text)
    original_confidence: Optional[str] = Field(default=None, max_length=32)
    clarify_conversation: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"BulkRow(id={self.id}, project_id={self.project_id}, row_number={self.row_number})"
