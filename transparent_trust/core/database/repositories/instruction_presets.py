"""Instruction preset repository."""

from __future__ import annotations

from typing import List

from sqlalchemy import and_, case, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from transparent_trust.core.models.domain.enums import ShareStatus

from ..entities.instruction_presets import InstructionPreset
from .base import SqlRepository

# Display order for share statuses
_SHARE_STATUS_ORDER = {
    ShareStatus.approved.value: 0,
    ShareStatus.pending_approval.value: 1,
    ShareStatus.private.value: 2,
    ShareStatus.rejected.value: 3,
}


class InstructionPresetRepository(SqlRepository[InstructionPreset]):
    """Repository for instruction presets."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, InstructionPreset)

    async def list_visible(self, user_id: str, include_pending: bool = False) -> List[InstructionPreset]:
        """Presets the user may see.

        That is the user's own presets plus approved shared ones, and pending
        ones when ``include_pending`` is set (prompt admins only).
        """
        visible = [
            InstructionPreset.created_by == user_id,
            and_(
                InstructionPreset.is_shared == True,  # noqa: E712
                InstructionPreset.share_status == ShareStatus.approved.value,
            ),
        ]
        if include_pending:
            visible.append(InstructionPreset.share_status == ShareStatus.pending_approval.value)

        status_rank = case(_SHARE_STATUS_ORDER, value=InstructionPreset.share_status, else_=len(_SHARE_STATUS_ORDER))
        stmt = (
            select(InstructionPreset)
            .where(or_(*visible))
            .order_by(
                InstructionPreset.is_default.desc(),  # type: ignore[attr-defined]
                status_rank,
                InstructionPreset.is_shared.desc(),  # type: ignore[attr-defined]
                InstructionPreset.name.asc(),  # type: ignore[attr-defined]
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
