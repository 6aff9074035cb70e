"""
Audit Log Endpoints.

Read-only, paginated view over the audit trail for users with VIEW_ORG_DATA.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.database import get_session
from transparent_trust.core.database.repositories import AuditLogRepository
from transparent_trust.core.models.domain import AuditAction, AuditEntityType, Capability, CurrentUser
from transparent_trust.core.models.io import AuditLogRead, DataResponse, Pagination
from transparent_trust.server.services.deps import require_capability

router = APIRouter(tags=["audit-log"])


@router.get(
    "",
    response_model=DataResponse[List[AuditLogRead]],
    summary="Search Audit Log",
    description="Search audit entries, newest first. Requires VIEW_ORG_DATA.",
)
async def search_audit_log(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    entity_type: Optional[AuditEntityType] = None,
    entity_id: Optional[str] = None,
    action: Optional[AuditAction] = None,
    user_id: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_capability(Capability.view_org_data)),
) -> DataResponse[List[AuditLogRead]]:
    """
    Search the audit log.

    - **page** / **limit**: 1-based page and page size (at most 100).
    - **entity_type**, **entity_id**, **action**, **user_id**: Exact filters.
    - **search**: Case-insensitive match on entity title, user name and email.
    - **start_date** / **end_date**: Inclusive bounds on the entry time.
    """
    entries, total = await AuditLogRepository(session).search(
        page=page,
        limit=limit,
        entity_type=entity_type.value if entity_type else None,
        entity_id=entity_id,
        action=action.value if action else None,
        user_id=user_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return DataResponse(
        data=[AuditLogRead.model_validate(e) for e in entries],
        pagination=Pagination.for_page(total, limit, page),
    )
