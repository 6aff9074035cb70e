"""Collateral output I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from transparent_trust.core.models.domain import CollateralStatus, FeedbackRating, ReviewStatus


class ReviewableRead(BaseModel):
    """Flag, queue and review fields shared by reviewable records."""

    model_config = ConfigDict(from_attributes=True)

    flagged_for_review: bool = False
    flagged_at: Optional[datetime] = None
    flagged_by: Optional[str] = None
    flag_note: Optional[str] = None
    flag_resolved: bool = False
    flag_resolved_at: Optional[datetime] = None
    flag_resolved_by: Optional[str] = None
    flag_resolution_note: Optional[str] = None
    queued_for_review: bool = False
    queued_at: Optional[datetime] = None
    queued_by: Optional[str] = None
    queued_note: Optional[str] = None
    queued_reviewer_id: Optional[str] = None
    queued_reviewer_name: Optional[str] = None
    review_status: str = ReviewStatus.none.value
    review_requested_at: Optional[datetime] = None
    review_requested_by: Optional[str] = None
    review_note: Optional[str] = None
    assigned_reviewer_id: Optional[str] = None
    assigned_reviewer_name: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None


class ReviewWorkflowUpdate(BaseModel):
    """Workflow fields accepted by PATCH on reviewable records."""

    flagged_for_review: Optional[bool] = None
    flag_note: Optional[str] = None
    flag_resolved: Optional[bool] = None
    flag_resolution_note: Optional[str] = None
    queued_for_review: Optional[bool] = None
    queued_note: Optional[str] = None
    queued_reviewer_id: Optional[str] = None
    queued_reviewer_name: Optional[str] = None
    review_status: Optional[ReviewStatus] = None
    review_note: Optional[str] = None
    assigned_reviewer_id: Optional[str] = None
    assigned_reviewer_name: Optional[str] = None


class CollateralOutputRead(ReviewableRead):
    """Schema for reading a collateral output from API."""

    id: str
    name: str
    template_id: Optional[str] = None
    customer_id: Optional[str] = None
    owner_id: str
    status: str
    filled_content: Optional[str] = None
    generated_markdown: Optional[str] = None
    placeholders_used: List[str] = Field(default_factory=list)
    output_format: str = "markdown"
    rating: Optional[str] = None
    feedback_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CollateralOutputCreate(BaseModel):
    """Schema for saving a collateral output via API."""

    name: str = Field(min_length=1, max_length=255)
    template_id: Optional[str] = None
    customer_id: Optional[str] = None
    status: CollateralStatus = CollateralStatus.draft
    filled_content: Optional[str] = None
    generated_markdown: Optional[str] = None
    placeholders_used: List[str] = Field(default_factory=list)
    output_format: str = "markdown"


class CollateralOutputUpdate(ReviewWorkflowUpdate):
    """Schema for updating a collateral output via API."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[CollateralStatus] = None
    filled_content: Optional[str] = None
    generated_markdown: Optional[str] = None
    placeholders_used: Optional[List[str]] = None
    rating: Optional[FeedbackRating] = None
    feedback_comment: Optional[str] = None
