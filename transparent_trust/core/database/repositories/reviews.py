"""
Review inbox queries.

Builds the shared flag / review filter for every reviewable table so the
inbox can merge project rows and collateral into one list.
"""

from __future__ import annotations

from typing import List, Optional, Type, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.collateral_outputs import CollateralOutput
from ..entities.projects import BulkRow
from ..entities.reviewable import ReviewableFields

ReviewableType = TypeVar("ReviewableType", bound=ReviewableFields)


def build_review_filter(
    model: Type[ReviewableFields],
    *,
    status: str = "REQUESTED",
    item_type: Optional[str] = None,
    assigned_to: Optional[str] = None,
    include_unassigned: bool = True,
):
    """Build the WHERE clause for a reviewable table.

    ``item_type``:
        ``flagged``  – open flags only
        ``resolved`` – resolved flags only
        ``review``   – review requests with ``status``
        ``None``     – review requests with ``status`` or open flags
    """
    open_flag = and_(model.flagged_for_review == True, model.flag_resolved == False)  # noqa: E712
    if item_type == "flagged":
        clause = open_flag
    elif item_type == "resolved":
        clause = and_(model.flagged_for_review == True, model.flag_resolved == True)  # noqa: E712
    elif item_type == "review":
        clause = model.review_status == status
    else:
        clause = or_(model.review_status == status, open_flag)

    if assigned_to:
        if include_unassigned:
            assignment = or_(
                model.assigned_reviewer_id == assigned_to,
                model.assigned_reviewer_id.is_(None),  # type: ignore[union-attr]
            )
        else:
            assignment = model.assigned_reviewer_id == assigned_to
        clause = and_(clause, assignment)
    return clause


class ReviewInboxRepository:
    """Read-only queries backing the reviews inbox."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _list(self, model: Type[ReviewableType], limit: int, **filters) -> List[ReviewableType]:
        stmt = (
            select(model)
            .where(build_review_filter(model, **filters))
            .order_by(model.review_requested_at.desc())  # type: ignore[union-attr]
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_rows(self, limit: int = 50, **filters) -> List[BulkRow]:
        return await self._list(BulkRow, limit, **filters)

    async def list_collateral(self, limit: int = 50, **filters) -> List[CollateralOutput]:
        return await self._list(CollateralOutput, limit, **filters)
