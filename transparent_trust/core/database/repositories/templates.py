"""Template repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.templates import Template
from .base import SqlRepository


class TemplateRepository(SqlRepository[Template]):
    """Repository for document templates."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Template)

    async def list_templates(self, category: Optional[str] = None, active_only: bool = True) -> List[Template]:
        """List templates ordered by ``sort_order`` then name."""
        stmt = select(Template)
        if category:
            stmt = stmt.where(Template.category == category)
        if active_only:
            stmt = stmt.where(Template.is_active == True)  # noqa: E712
        stmt = stmt.order_by(Template.sort_order.asc(), Template.name.asc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
