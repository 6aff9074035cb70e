"""
Audit log repository.

Provides the filtered, paginated search behind the audit log viewer.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.audit_logs import AuditLog
from .base import QueryBuilder, SqlRepository


class AuditLogRepository(SqlRepository[AuditLog]):
    """Repository for audit log entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuditLog)

    async def search(
        self,
        *,
        page: int = 1,
        limit: int = 50,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        action: Optional[str] = None,
        user_id: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[AuditLog], int]:
        """Search audit entries, newest first.

        Args:
            page: 1-based page number
            limit: Page size
            entity_type: Exact entity type filter
            entity_id: Exact entity id filter
            action: Exact action filter
            user_id: Exact acting user filter
            search: Case-insensitive substring over title, user name and email
            start_date: Inclusive lower bound on ``created_at``
            end_date: Inclusive upper bound on ``created_at``

        Returns:
            Tuple of (entries on the page, total matching entries)
        """
        stmt = select(AuditLog)
        stmt = QueryBuilder.apply_filters(
            stmt,
            AuditLog,
            {"entity_type": entity_type, "entity_id": entity_id, "action": action, "user_id": user_id},
        )
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    AuditLog.entity_title.ilike(pattern),  # type: ignore[union-attr]
                    AuditLog.user_name.ilike(pattern),  # type: ignore[union-attr]
                    AuditLog.user_email.ilike(pattern),  # type: ignore[union-attr]
                )
            )
        if start_date is not None:
            stmt = stmt.where(AuditLog.created_at >= start_date)
        if end_date is not None:
            stmt = stmt.where(AuditLog.created_at <= end_date)

        stmt = stmt.order_by(AuditLog.created_at.desc())  # type: ignore[attr-defined]
        return await self._fetch_page(stmt, limit, (page - 1) * limit)

    async def list_for_entity(self, entity_type: str, entity_id: str) -> List[AuditLog]:
        """Full history of a single entity, newest first."""
        stmt = (
            select(AuditLog)
            .where(AuditLog.entity_type == entity_type)
            .where(AuditLog.entity_id == entity_id)
            .order_by(AuditLog.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
