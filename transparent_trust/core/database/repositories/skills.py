"""Skill repository."""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.skills import Skill
from .base import SqlRepository


class SkillRepository(SqlRepository[Skill]):
    """Repository for knowledge skills."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Skill)

    async def list_skills(
        self, *, active: Optional[bool] = True, category: Optional[str] = None, limit: int = 100
    ) -> List[Skill]:
        """List skills, most recently updated first.

        Category membership lives in a JSON list, so it is checked after loading
        to stay portable across database backends.
        """
        stmt = select(Skill)
        if active is not None:
            stmt = stmt.where(Skill.is_active == active)
        stmt = stmt.order_by(Skill.updated_at.desc())  # type: ignore[attr-defined]
        if category is None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        skills = list(result.scalars().all())
        if category is not None:
            skills = [s for s in skills if category in (s.categories or [])][:limit]
        return skills

    async def get_many(self, skill_ids: Sequence[str]) -> List[Skill]:
        """Load skills by id, preserving the requested order."""
        if not skill_ids:
            return []
        stmt = select(Skill).where(Skill.id.in_(list(skill_ids)))  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        by_id = {s.id: s for s in result.scalars().all()}
        return [by_id[i] for i in skill_ids if i in by_id]
