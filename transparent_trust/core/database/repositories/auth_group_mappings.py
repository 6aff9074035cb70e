"""Auth group mapping repository."""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.auth_group_mappings import AuthGroupMapping
from .base import SqlRepository


class AuthGroupMappingRepository(SqlRepository[AuthGroupMapping]):
    """Repository for SSO group mappings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuthGroupMapping)

    async def list_ordered(self) -> List[AuthGroupMapping]:
        stmt = select(AuthGroupMapping).order_by(
            AuthGroupMapping.provider.asc(),  # type: ignore[attr-defined]
            AuthGroupMapping.group_id.asc(),  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_provider_group(self, provider: str, group_id: str) -> Optional[AuthGroupMapping]:
        stmt = select(AuthGroupMapping).where(
            (AuthGroupMapping.provider == provider) & (AuthGroupMapping.group_id == group_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_active_for_groups(self, provider: str, group_ids: Sequence[str]) -> List[AuthGroupMapping]:
        """Active mappings of ``provider`` whose group is in ``group_ids``."""
        if not group_ids:
            return []
        stmt = select(AuthGroupMapping).where(
            (AuthGroupMapping.provider == provider)
            & (AuthGroupMapping.group_id.in_(list(group_ids)))  # type: ignore[attr-defined]
            & (AuthGroupMapping.is_active == True)  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
