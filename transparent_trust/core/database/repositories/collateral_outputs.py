"""Collateral output repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.collateral_outputs import CollateralOutput
from .base import QueryBuilder, SqlRepository


class CollateralOutputRepository(SqlRepository[CollateralOutput]):
    """Repository for generated collateral."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CollateralOutput)

    async def list_for_owner(
        self,
        owner_id: str,
        *,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[CollateralOutput], int]:
        """Owner-scoped listing, most recently updated first."""
        stmt = select(CollateralOutput).where(CollateralOutput.owner_id == owner_id)
        stmt = QueryBuilder.apply_filters(stmt, CollateralOutput, {"status": status, "customer_id": customer_id})
        stmt = stmt.order_by(CollateralOutput.updated_at.desc())  # type: ignore[attr-defined]
        return await self._fetch_page(stmt, limit, offset)
