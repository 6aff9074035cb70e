"""
Collateral Output Endpoints.

Generated customer-facing documents, scoped to their owner. Outputs go
through the same flag / queue / review workflow as project rows; reviewers
can open any output and act on its workflow fields, but only the owner
edits content or deletes it.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import compute_changes, get_request_context, log_collateral_change
from transparent_trust.core.capabilities import can_review
from transparent_trust.core.database import get_session
from transparent_trust.core.database.entities.collateral_outputs import CollateralOutput
from transparent_trust.core.database.repositories import CollateralOutputRepository
from transparent_trust.core.models.domain import AuditAction, CollateralStatus, CurrentUser
from transparent_trust.core.models.io import (
    CollateralOutputCreate,
    CollateralOutputRead,
    CollateralOutputUpdate,
    DataResponse,
    DeletedResponse,
    Pagination,
    ReviewWorkflowUpdate,
)
from transparent_trust.core.workflow import apply_workflow_changes
from transparent_trust.server.services.deps import require_user

router = APIRouter(tags=["collateral"])

WORKFLOW_FIELDS = frozenset(ReviewWorkflowUpdate.model_fields)


async def _get_output_or_404(
    session: AsyncSession, output_id: str, user: CurrentUser, reviewer_access: bool = False
) -> CollateralOutput:
    output = await CollateralOutputRepository(session).get_by_id(output_id)
    if output is None or (output.owner_id != user.id and not (reviewer_access and can_review(user.capabilities))):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Collateral output not found")
    return output


@router.get(
    "/outputs",
    response_model=DataResponse[List[CollateralOutputRead]],
    summary="List Collateral Outputs",
    description="List the caller's collateral outputs, most recently updated first.",
)
async def list_outputs(
    status_filter: Optional[CollateralStatus] = Query(default=None, alias="status"),
    customer_id: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[List[CollateralOutputRead]]:
    outputs, total = await CollateralOutputRepository(session).list_for_owner(
        user.id,
        status=status_filter.value if status_filter else None,
        customer_id=customer_id,
        limit=limit,
        offset=offset,
    )
    return DataResponse(
        data=[CollateralOutputRead.model_validate(o) for o in outputs],
        pagination=Pagination.for_offset(total, limit, offset),
    )


@router.post(
    "/outputs",
    response_model=DataResponse[CollateralOutputRead],
    status_code=status.HTTP_201_CREATED,
    summary="Save Collateral Output",
)
async def create_output(
    payload: CollateralOutputCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[CollateralOutputRead]:
    output = CollateralOutput(**payload.model_dump(mode="json"), owner_id=user.id)
    output = await CollateralOutputRepository(session).create(output)
    await log_collateral_change(
        session,
        AuditAction.created,
        output.id,
        output.name,
        user=user,
        details={"template_id": output.template_id, "customer_id": output.customer_id},
        request_context=get_request_context(request),
    )
    return DataResponse(data=CollateralOutputRead.model_validate(output))


@router.get(
    "/outputs/{output_id}",
    response_model=DataResponse[CollateralOutputRead],
    summary="Get Collateral Output",
    responses={404: {"description": "Collateral output not found"}},
)
async def get_output(
    output_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[CollateralOutputRead]:
    output = await _get_output_or_404(session, output_id, user, reviewer_access=True)
    return DataResponse(data=CollateralOutputRead.model_validate(output))


@router.patch(
    "/outputs/{output_id}",
    response_model=DataResponse[CollateralOutputRead],
    summary="Update Collateral Output",
    description="Edit content, rate the output, or move it through the review workflow.",
    responses={
        400: {"description": "Invalid workflow change"},
        403: {"description": "Only the owner can edit content"},
        404: {"description": "Collateral output not found"},
    },
)
async def update_output(
    output_id: str,
    payload: CollateralOutputUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[CollateralOutputRead]:
    """
    Update a collateral output.

    - Content fields: **name**, **status**, **filled_content**, **generated_markdown**, **placeholders_used**.
    - Feedback: **rating** (THUMBS_UP / THUMBS_DOWN) and **feedback_comment**.
    - Workflow: flag, flag resolution, queue and review status fields.

    Requesting a review moves the output to NEEDS_REVIEW; approving it moves it to APPROVED.
    """
    output = await _get_output_or_404(session, output_id, user, reviewer_access=True)
    before = output.model_dump()
    update_data = payload.model_dump(exclude_unset=True, mode="json")
    if output.owner_id != user.id and any(key not in WORKFLOW_FIELDS for key in update_data):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner can edit collateral content"
        )

    for key, value in update_data.items():
        if key not in WORKFLOW_FIELDS:
            setattr(output, key, value)

    actions = apply_workflow_changes(output, {k: v for k, v in update_data.items() if k in WORKFLOW_FIELDS}, user)
    if AuditAction.review_requested in actions:
        output.status = CollateralStatus.needs_review.value
    if AuditAction.approved in actions:
        output.status = CollateralStatus.approved.value

    output = await CollateralOutputRepository(session).update(output)

    changes = compute_changes(before, output.model_dump())
    context = get_request_context(request)
    for action in actions or [AuditAction.updated]:
        await log_collateral_change(
            session,
            action,
            output.id,
            output.name,
            user=user,
            changes=changes,
            details={"review_note": output.review_note} if action is AuditAction.review_requested else None,
            request_context=context,
        )
    return DataResponse(data=CollateralOutputRead.model_validate(output))


@router.delete(
    "/outputs/{output_id}",
    response_model=DataResponse[DeletedResponse],
    summary="Delete Collateral Output",
    responses={404: {"description": "Collateral output not found"}},
)
async def delete_output(
    output_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[DeletedResponse]:
    output = await _get_output_or_404(session, output_id, user)
    name = output.name
    await CollateralOutputRepository(session).delete(output_id)
    await log_collateral_change(
        session,
        AuditAction.deleted,
        output_id,
        name,
        user=user,
        request_context=get_request_context(request),
    )
    return DataResponse(data=DeletedResponse())
