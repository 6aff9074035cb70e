"""
Reviews Inbox Endpoint.

One list of everything awaiting a reviewer: project rows and collateral
outputs with an open review request or flag.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.database import as_utc, get_session
from transparent_trust.core.database.entities.collateral_outputs import CollateralOutput
from transparent_trust.core.database.entities.projects import BulkProject, BulkRow
from transparent_trust.core.database.repositories import BulkProjectRepository, ReviewInboxRepository
from transparent_trust.core.models.domain import Capability, CurrentUser, ReviewStatus
from transparent_trust.core.models.io import DataResponse, ReviewItem, ReviewProjectRef
from transparent_trust.server.services.deps import require_capability

router = APIRouter(tags=["reviews"])

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(item: ReviewItem) -> datetime:
    value = item.review_requested_at
    if value is None:
        return _OLDEST
    return as_utc(value)


def _row_item(row: BulkRow, project: Optional[BulkProject]) -> ReviewItem:
    data = ReviewItem.model_validate(
        {
            **row.model_dump(),
            "source": "project",
            "title": row.question,
            "response": row.user_edited_answer or row.response,
        }
    )
    if project is not None:
        data.project = ReviewProjectRef(
            id=project.id,
            name=project.name,
            customer_id=project.customer_id,
            customer_name=project.customer_name,
        )
        data.customer_id = project.customer_id
        data.owner_id = project.owner_id
    return data


def _collateral_item(output: CollateralOutput) -> ReviewItem:
    return ReviewItem.model_validate(
        {
            **output.model_dump(),
            "source": "collateral",
            "title": output.name,
            "response": output.generated_markdown or output.filled_content,
        }
    )


@router.get(
    "",
    response_model=DataResponse[List[ReviewItem]],
    summary="Review Inbox",
    description="Rows and collateral awaiting review or carrying open flags, newest request first.",
)
async def list_reviews(
    review_status: ReviewStatus = Query(default=ReviewStatus.requested, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    assigned_to: Optional[str] = None,
    include_unassigned: bool = True,
    source: Optional[Literal["projects", "collateral"]] = None,
    item_type: Optional[Literal["review", "flagged", "resolved"]] = Query(default=None, alias="type"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_capability(Capability.review_answers)),
) -> DataResponse[List[ReviewItem]]:
    """
    List inbox items.

    - **status**: Review status to match (default REQUESTED).
    - **assigned_to**: Only items assigned to this reviewer id.
    - **include_unassigned**: With **assigned_to**, also include unassigned items (default true).
    - **source**: ``projects`` or ``collateral``; both when omitted.
    - **type**: ``review``, ``flagged`` or ``resolved``; review requests and open flags when omitted.
    """
    repo = ReviewInboxRepository(session)
    filters = dict(
        status=review_status.value,
        item_type=item_type,
        assigned_to=assigned_to,
        include_unassigned=include_unassigned,
    )
    items: List[ReviewItem] = []

    if source in (None, "projects"):
        rows = await repo.list_rows(limit=limit, **filters)
        projects = await BulkProjectRepository(session).get_many(list({r.project_id for r in rows}))
        items.extend(_row_item(r, projects.get(r.project_id)) for r in rows)

    if source in (None, "collateral"):
        outputs = await repo.list_collateral(limit=limit, **filters)
        items.extend(_collateral_item(o) for o in outputs)

    items.sort(key=_sort_key, reverse=True)
    return DataResponse(data=items[:limit])
