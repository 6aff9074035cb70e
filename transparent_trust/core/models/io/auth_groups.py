"""Auth group mapping I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthGroupMappingRead(BaseModel):
    """Schema for reading an SSO group mapping from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    provider: str
    group_id: str
    group_name: Optional[str] = None
    capabilities: List[str] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthGroupMappingCreate(BaseModel):
    """Schema for creating an SSO group mapping via API.

    Unknown capability names are dropped.
    """

    provider: str = Field(min_length=1, max_length=64)
    group_id: str = Field(min_length=1, max_length=255)
    group_name: Optional[str] = Field(default=None, max_length=255)
    capabilities: List[str] = Field(default_factory=list)
    is_active: bool = True


class AuthGroupMappingUpdate(BaseModel):
    """Schema for updating an SSO group mapping via API."""

    id: str = Field(min_length=1)
    group_name: Optional[str] = Field(default=None, max_length=255)
    capabilities: Optional[List[str]] = None
    is_active: Optional[bool] = None


class SeedResult(BaseModel):
    created: List[str] = Field(default_factory=list, description="Group ids that were inserted")
    skipped: List[str] = Field(default_factory=list, description="Group ids that already existed")
