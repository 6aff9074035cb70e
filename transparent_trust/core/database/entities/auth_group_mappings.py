"""
Auth group mapping entity models.

Maps an SSO group (per identity provider) to the capabilities its members
receive.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, UniqueConstraint
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class AuthGroupMapping(Base, table=True):
    """SSO group to capability mapping.

    Table: tt_auth_group_mappings
    """

    __tablename__ = "tt_auth_group_mappings"
    __table_args__ = (
        UniqueConstraint("provider", "group_id", name="uq_tt_auth_group_mappings_provider_group"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    provider: str = Field(max_length=64, index=True)
    group_id: str = Field(max_length=255)
    group_name: Optional[str] = Field(default=None, max_length=255)
    capabilities: List[str] = Field(default_factory=list, sa_type=JSON)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime(timezone=True)
    )

    def __repr__(self) -> str:
        return f"AuthGroupMapping(provider={self.provider}, group_id={self.group_id})"
