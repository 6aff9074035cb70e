"""
Shared review workflow columns.

Bulk project rows and collateral outputs both go through the same
flag / queue / review workflow, so they share these columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Text

from ..base import Base


class ReviewableFields(Base):
    """Flag, queue and review-request columns for reviewable records."""

    # Flagging
    flagged_for_review: bool = Field(default=False, index=True)
    flagged_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    flagged_by: Optional[str] = Field(default=None, max_length=255)
    flag_note: Optional[str] = Field(default=None, sa_type=Text)

    # Flag resolution
    flag_resolved: bool = Field(default=False)
    flag_resolved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    flag_resolved_by: Optional[str] = Field(default=None, max_length=255)
    flag_resolution_note: Optional[str] = Field(default=None, sa_type=Text)

    # Queue (staged review requests, sent in batch)
    queued_for_review: bool = Field(default=False)
    queued_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    queued_by: Optional[str] = Field(default=None, max_length=255)
    queued_note: Optional[str] = Field(default=None, sa_type=Text)
    queued_reviewer_id: Optional[str] = Field(default=None, max_length=64)
    queued_reviewer_name: Optional[str] = Field(default=None, max_length=255)

    # Review request and outcome
    review_status: str = Field(default="NONE", max_length=16, index=True)
    review_requested_at: Optional[datetime] = Field(default=None, index=True, sa_type=DateTime(timezone=True))
    review_requested_by: Optional[str] = Field(default=None, max_length=255)
    review_note: Optional[str] = Field(default=None, sa_type=Text)
    assigned_reviewer_id: Optional[str] = Field(default=None, max_length=64, index=True)
    assigned_reviewer_name: Optional[str] = Field(default=None, max_length=255)
    reviewed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    reviewed_by: Optional[str] = Field(default=None, max_length=255)
