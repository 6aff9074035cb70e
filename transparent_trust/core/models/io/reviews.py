"""Reviews inbox I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .collateral import ReviewableRead


class ReviewProjectRef(BaseModel):
    id: str
    name: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None


class ReviewItem(ReviewableRead):
    """One inbox entry: a project row or a collateral output."""

    id: str
    source: Literal["project", "collateral"]
    title: str = Field(description="Question of a row or name of a collateral output")
    row_number: Optional[int] = None
    question: Optional[str] = None
    response: Optional[str] = None
    confidence: Optional[str] = None
    project: Optional[ReviewProjectRef] = None
    customer_id: Optional[str] = None
    owner_id: Optional[str] = None
    status: Optional[str] = None
    updated_at: Optional[datetime] = None
