"""Bulk project and row repositories."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.projects import BulkProject, BulkRow
from .base import SqlRepository


class BulkProjectRepository(SqlRepository[BulkProject]):
    """Repository for bulk projects."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BulkProject)

    async def list_for_owner(self, owner_id: str) -> List[BulkProject]:
        stmt = (
            select(BulkProject)
            .where(BulkProject.owner_id == owner_id)
            .order_by(BulkProject.updated_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, project_ids: Sequence[str]) -> Dict[str, BulkProject]:
        """Projects keyed by id."""
        if not project_ids:
            return {}
        stmt = select(BulkProject).where(BulkProject.id.in_(list(project_ids)))  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return {p.id: p for p in result.scalars().all()}


class BulkRowRepository(SqlRepository[BulkRow]):
    """Repository for bulk project rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BulkRow)

    async def list_for_project(self, project_id: str) -> List[BulkRow]:
        stmt = (
            select(BulkRow)
            .where(BulkRow.project_id == project_id)
            .order_by(BulkRow.row_number.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_in_project(self, project_id: str, row_id: str) -> Optional[BulkRow]:
        """Row ``row_id`` only if it belongs to ``project_id``."""
        row = await self.get_by_id(row_id)
        if row is None or row.project_id != project_id:
            return None
        return row
