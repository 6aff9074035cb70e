"""
Audit log entity models.

Append-only record of who did what to which entity.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class AuditLog(Base, table=True):
    """Entity for audit trail entries.

    ``changes`` holds ``{field: {"from": old, "to": new}}`` diffs and
    ``details`` any extra action-specific context.

    Table: tt_audit_logs
    """

    __tablename__ = "tt_audit_logs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    entity_type: str = Field(max_length=32, index=True)
    entity_id: str = Field(max_length=64, index=True)
    entity_title: Optional[str] = Field(default=None, max_length=500)
    action: str = Field(max_length=32, index=True)

    user_id: Optional[str] = Field(default=None, max_length=64, index=True)
    user_name: Optional[str] = Field(default=None, max_length=255)
    user_email: Optional[str] = Field(default=None, max_length=255)

    changes: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    details: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"AuditLog(entity_type={self.entity_type}, entity_id={self.entity_id}, action={self.action})"
