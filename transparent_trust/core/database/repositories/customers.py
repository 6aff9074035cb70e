"""Customer profile repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.customers import CustomerProfile
from ..entities.projects import BulkProject
from .base import SqlRepository


class CustomerProfileRepository(SqlRepository[CustomerProfile]):
    """Repository for customer profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CustomerProfile)

    async def list_profiles(
        self,
        *,
        active: Optional[bool] = None,
        industry: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[CustomerProfile], int]:
        """List profiles, most recently updated first.

        ``search`` matches name, industry and overview case-insensitively.
        """
        stmt = select(CustomerProfile)
        if active is not None:
            stmt = stmt.where(CustomerProfile.is_active == active)
        if industry:
            stmt = stmt.where(CustomerProfile.industry == industry)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    CustomerProfile.name.ilike(pattern),  # type: ignore[attr-defined]
                    CustomerProfile.industry.ilike(pattern),  # type: ignore[union-attr]
                    CustomerProfile.overview.ilike(pattern),  # type: ignore[attr-defined]
                )
            )
        stmt = stmt.order_by(CustomerProfile.updated_at.desc())  # type: ignore[attr-defined]
        return await self._fetch_page(stmt, limit, offset)

    async def count_linked_projects(self, customer_id: str) -> int:
        """Number of bulk projects referencing the profile."""
        stmt = select(func.count()).select_from(BulkProject).where(BulkProject.customer_id == customer_id)
        return int((await self.session.execute(stmt)).scalar_one())
