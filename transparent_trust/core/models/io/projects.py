"""Bulk project I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from transparent_trust.core.models.domain import ProjectStatus, RowStatus

from .collateral import ReviewableRead, ReviewWorkflowUpdate


class BulkRowRead(ReviewableRead):
    """Schema for reading a project row from API."""

    id: str
    project_id: str
    row_number: int
    question: str
    response: Optional[str] = None
    status: str
    confidence: Optional[str] = None
    user_edited_answer: Optional[str] = None
    original_response: Optional[str] = None
    original_confidence: Optional[str] = None
    clarify_conversation: List[Dict[str, Any]] = Field(default_factory=list)
    review_stage: Optional[str] = Field(default=None, description="Workflow stage derived from the review fields")
    next_stages: List[str] = Field(default_factory=list, description="Stages the row can move to next")
    created_at: datetime
    updated_at: datetime


class BulkProjectRead(BaseModel):
    """Schema for reading a project from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    sheet_name: Optional[str] = None
    columns: List[str] = Field(default_factory=list)
    owner_id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class BulkProjectDetailRead(BulkProjectRead):
    rows: List[BulkRowRead] = Field(default_factory=list)


class BulkRowCreate(BaseModel):
    row_number: int = Field(ge=0)
    question: str = Field(min_length=1)
    response: Optional[str] = None
    status: RowStatus = RowStatus.pending
    confidence: Optional[str] = Field(default=None, max_length=32)


class BulkProjectCreate(BaseModel):
    """Schema for creating a project with its rows via API."""

    name: str = Field(min_length=1, max_length=255)
    sheet_name: Optional[str] = Field(default=None, max_length=255)
    columns: List[str] = Field(default_factory=list)
    customer_id: Optional[str] = None
    customer_name: Optional[str] = Field(default=None, max_length=255)
    status: ProjectStatus = ProjectStatus.draft
    rows: List[BulkRowCreate] = Field(default_factory=list)


class BulkRowUpdate(ReviewWorkflowUpdate):
    """Row edits plus workflow changes."""

    response: Optional[str] = None
    status: Optional[RowStatus] = None
    confidence: Optional[str] = Field(default=None, max_length=32)
    user_edited_answer: Optional[str] = None


class ReviewRequest(BaseModel):
    review_note: Optional[str] = None
    assigned_reviewer_id: Optional[str] = None
    assigned_reviewer_name: Optional[str] = None


class ClarifyMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ClarifyRequest(BaseModel):
    """The clarify conversation held about a row's answer, as it stands now."""

    conversation: List[ClarifyMessage] = Field(min_length=1)
    user_message: Optional[str] = None


class ClarifyResult(BaseModel):
    row: BulkRowRead
    auto_flagged: bool


class RowFeedback(BaseModel):
    """A row whose answer or confidence was changed by a person."""

    id: str
    row_number: int
    question: str
    feedback_type: Literal["response_edited", "confidence_changed"]
    original: Optional[str] = None
    corrected: Optional[str] = None
    original_confidence: Optional[str] = None
    new_confidence: Optional[str] = None


class FeedbackStats(BaseModel):
    total_rows: int
    completed_rows: int
    edited_responses: int
    reviewed_rows: int
    flagged_rows: int


class ProjectFeedback(BaseModel):
    project_id: str
    project_name: str
    customer_name: Optional[str] = None
    stats: FeedbackStats
    feedback: List[RowFeedback] = Field(default_factory=list)
