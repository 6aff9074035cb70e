"""Template I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from transparent_trust.core.models.domain import OutputFormat


class TemplateRead(BaseModel):
    """Schema for reading a template from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    content: str
    category: Optional[str] = None
    output_format: str
    placeholder_hint: Optional[str] = None
    instruction_preset_id: Optional[str] = None
    is_active: bool
    sort_order: int
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    git_commit_sha: Optional[str] = None
    sync_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TemplateDetailRead(TemplateRead):
    """Template plus a hint for every placeholder it contains."""

    placeholder_hints: Dict[str, str] = Field(default_factory=dict)


class TemplateCreate(BaseModel):
    """Schema for creating a template via API."""

    name: str = Field(min_length=1, max_length=200, description="Display name")
    description: Optional[str] = Field(default=None, max_length=1000)
    content: str = Field(min_length=1, description="Markdown body with placeholders")
    category: Optional[str] = Field(default=None, max_length=100)
    output_format: OutputFormat = Field(default=OutputFormat.markdown)
    placeholder_hint: Optional[str] = Field(default=None, max_length=2000)
    instruction_preset_id: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0


class TemplateUpdate(BaseModel):
    """Schema for updating a template via API."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, max_length=100)
    output_format: Optional[OutputFormat] = None
    placeholder_hint: Optional[str] = Field(default=None, max_length=2000)
    instruction_preset_id: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class TemplateFillRequest(BaseModel):
    """Fill a template from customer, skill, GTM and custom data."""

    template_id: str
    customer_id: Optional[str] = None
    skill_ids: List[str] = Field(default_factory=list)
    gtm_data: Optional[Dict[str, Any]] = None
    custom_values: Dict[str, str] = Field(default_factory=dict)
    instructions: Optional[str] = Field(default=None, max_length=10000)


class TemplateSummary(BaseModel):
    id: str
    name: str
    category: Optional[str] = None


class TemplateFillResponse(BaseModel):
    filled_content: str
    output_format: str
    placeholders_used: List[str]
    placeholders_missing: List[str]
    llm_generated_sections: List[str]
    template: TemplateSummary
