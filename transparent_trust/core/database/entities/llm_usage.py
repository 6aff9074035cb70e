"""
LLM usage ledger entity models.

Append-only accounting of token consumption per feature and user.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class LlmUsage(Base, table=True):
    """Entity for token accounting.

    Table: tt_llm_usage
    """

    __tablename__ = "tt_llm_usage"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: Optional[str] = Field(default=None, max_length=64, index=True)
    user_email: Optional[str] = Field(default=None, max_length=255)
    feature: str = Field(max_length=64, index=True)

    provider: str = Field(max_length=64)
    model: str = Field(max_length=128, index=True)

    input_tokens: int = Field(default=0)
    output_tokens: int = Field(default=0)
    total_tokens: int = Field(default=0)

    details: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"LlmUsage(feature={self.feature}, model={self.model}, total_tokens={self.total_tokens})"
