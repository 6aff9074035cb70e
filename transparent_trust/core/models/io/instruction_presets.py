"""Instruction preset I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from transparent_trust.core.models.domain import ShareStatus


class InstructionPresetRead(BaseModel):
    """Schema for reading an instruction preset from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    content: str
    share_status: str
    is_shared: bool
    is_default: bool
    share_requested_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_by: Optional[str] = None
    created_by_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class InstructionPresetCreate(BaseModel):
    """Schema for creating an instruction preset via API."""

    name: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    request_share: bool = Field(default=False, description="Ask for the preset to be shared org-wide")


class InstructionPresetUpdate(BaseModel):
    """Schema for updating an instruction preset via API.

    ``share_status`` APPROVED/REJECTED and ``is_default`` are reserved for
    prompt admins.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    request_share: Optional[bool] = None
    share_status: Optional[ShareStatus] = None
    rejection_reason: Optional[str] = None
    is_default: Optional[bool] = None
