"""Customer profile I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KeyFact(BaseModel):
    label: str
    value: str


class SourceUrl(BaseModel):
    url: str
    added_at: Optional[str] = None
    last_fetched_at: Optional[str] = None


class CustomerProfileRead(BaseModel):
    """Schema for reading a customer profile from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    industry: Optional[str] = None
    website: Optional[str] = None
    region: Optional[str] = None
    tier: Optional[str] = None
    overview: str
    products: Optional[str] = None
    challenges: Optional[str] = None
    content: Optional[str] = None
    key_facts: List[Dict[str, Any]] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    source_urls: List[Dict[str, Any]] = Field(default_factory=list)
    considerations: List[str] = Field(default_factory=list)
    owners: List[Dict[str, Any]] = Field(default_factory=list)
    history: List[Dict[str, Any]] = Field(default_factory=list)
    is_active: bool
    created_by: Optional[str] = None
    owner_id: Optional[str] = None
    git_commit_sha: Optional[str] = None
    sync_status: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CustomerProfileCreate(BaseModel):
    """Schema for creating a customer profile via API."""

    name: str = Field(min_length=1, max_length=255)
    overview: str = Field(min_length=1)
    industry: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=2048)
    region: Optional[str] = Field(default=None, max_length=128)
    tier: Optional[str] = Field(default=None, max_length=64)
    products: Optional[str] = None
    challenges: Optional[str] = None
    content: Optional[str] = None
    key_facts: List[KeyFact] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    source_urls: List[SourceUrl] = Field(default_factory=list)
    considerations: List[str] = Field(default_factory=list)
    owners: List[Dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True


class CustomerProfileUpdate(BaseModel):
    """Schema for updating a customer profile via API.

    ``is_refresh`` marks the update as a refresh from sources in the
    profile history; it is not stored.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    overview: Optional[str] = Field(default=None, min_length=1)
    industry: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=2048)
    region: Optional[str] = Field(default=None, max_length=128)
    tier: Optional[str] = Field(default=None, max_length=64)
    products: Optional[str] = None
    challenges: Optional[str] = None
    content: Optional[str] = None
    key_facts: Optional[List[KeyFact]] = None
    tags: Optional[List[str]] = None
    source_urls: Optional[List[SourceUrl]] = None
    considerations: Optional[List[str]] = None
    owners: Optional[List[Dict[str, Any]]] = None
    is_active: Optional[bool] = None
    is_refresh: bool = False
