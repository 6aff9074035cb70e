"""Authenticated caller model."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .enums import Capability


class CurrentUser(BaseModel):
    """The user making a request, as asserted by the upstream SSO proxy."""

    id: str = Field(description="Stable user identifier")
    email: Optional[str] = Field(default=None)
    name: Optional[str] = Field(default=None)
    role: str = Field(default="USER", description="Legacy role (USER, PROMPT_ADMIN, ADMIN)")
    groups: List[str] = Field(default_factory=list, description="SSO group ids")
    capabilities: List[Capability] = Field(default_factory=list)

    @property
    def label(self) -> str:
        """Human-readable identifier used in history and workflow fields."""
        return self.email or self.name or self.id
