"""
Bulk Project Endpoints.

Projects are imported RFP questionnaires. Their rows carry the generated
answers, which are edited and reviewed through the shared workflow.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import (
    compute_changes,
    get_request_context,
    log_answer_change,
    log_project_change,
)
from transparent_trust.core.capabilities import can_review
from transparent_trust.core.database import get_session
from transparent_trust.core.database.entities.projects import BulkProject, BulkRow
from transparent_trust.core.database.repositories import BulkProjectRepository, BulkRowRepository
from transparent_trust.core.models.domain import AuditAction, Capability, CurrentUser, ReviewStatus, RowStatus
from transparent_trust.core.models.io import (
    BulkProjectCreate,
    BulkProjectDetailRead,
    BulkProjectRead,
    BulkRowRead,
    BulkRowUpdate,
    ClarifyRequest,
    ClarifyResult,
    DataResponse,
    FeedbackStats,
    ProjectFeedback,
    ReviewRequest,
    ReviewWorkflowUpdate,
    RowFeedback,
)
from transparent_trust.core.workflow import (
    apply_flag,
    apply_workflow_changes,
    next_stages,
    request_review,
    review_stage,
)
from transparent_trust.server.services.deps import require_capability, require_user

router = APIRouter(tags=["projects"])

WORKFLOW_FIELDS = frozenset(ReviewWorkflowUpdate.model_fields)
CORRECTION_FIELDS = ("response", "review_status", "user_edited_answer")
ANSWER_FIELDS = ("response", "confidence", "user_edited_answer")
CLARIFY_FLAG_NOTE = "Auto-flagged: Clarify conversation started"


def row_read(row: BulkRow) -> BulkRowRead:
    read = BulkRowRead.model_validate(row)
    read.review_stage = review_stage(row)
    read.next_stages = next_stages(row)
    return read


def _answer_title(row: BulkRow) -> str:
    return row.question[:200]


def _keep_original_answer(row: BulkRow, update_data: dict) -> None:
    """Remember the generated answer the first time a person changes it."""
    if row.original_response is not None or row.response is None:
        return
    if any(key in update_data and update_data[key] != getattr(row, key) for key in ANSWER_FIELDS):
        row.original_response = row.response
        row.original_confidence = row.confidence


def _row_feedback(row: BulkRow) -> Optional[RowFeedback]:
    if row.original_response is None:
        return None
    corrected = row.user_edited_answer or row.response
    if corrected and corrected != row.original_response:
        feedback_type = "response_edited"
    elif row.confidence != row.original_confidence:
        feedback_type = "confidence_changed"
    else:
        return None

    question = row.question if len(row.question) <= 200 else row.question[:200] + "..."
    return RowFeedback(
        id=row.id,
        row_number=row.row_number,
        question=question,
        feedback_type=feedback_type,
        original=row.original_response,
        corrected=corrected,
        original_confidence=row.original_confidence,
        new_confidence=row.confidence,
    )


async def _get_project_or_404(session: AsyncSession, project_id: str, user: CurrentUser) -> BulkProject:
    """The project, visible to its owner and to reviewers."""
    project = await BulkProjectRepository(session).get_by_id(project_id)
    if project is None or (project.owner_id != user.id and not can_review(user.capabilities)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


async def _get_row_or_404(session: AsyncSession, project_id: str, row_id: str, user: CurrentUser) -> BulkRow:
    await _get_project_or_404(session, project_id, user)
    row = await BulkRowRepository(session).get_in_project(project_id, row_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Row not found")
    return row


@router.get(
    "",
    response_model=DataResponse[List[BulkProjectRead]],
    summary="List Projects",
    description="List the caller's projects, most recently updated first.",
)
async def list_projects(
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[List[BulkProjectRead]]:
    projects = await BulkProjectRepository(session).list_for_owner(user.id)
    return DataResponse(data=[BulkProjectRead.model_validate(p) for p in projects])


@router.post(
    "",
    response_model=DataResponse[BulkProjectDetailRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Project",
    description="Create a project together with its rows. Requires CREATE_PROJECTS.",
)
async def create_project(
    payload: BulkProjectCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_capability(Capability.create_projects)),
) -> DataResponse[BulkProjectDetailRead]:
    project = BulkProject(**payload.model_dump(exclude={"rows"}, mode="json"), owner_id=user.id)
    project = await BulkProjectRepository(session).create(project)

    row_repo = BulkRowRepository(session)
    for row in payload.rows:
        session.add(BulkRow(project_id=project.id, **row.model_dump(mode="json")))
    await session.commit()
    rows = await row_repo.list_for_project(project.id)

    await log_project_change(
        session,
        AuditAction.created,
        project.id,
        project.name,
        user=user,
        details={"rows": len(rows), "customer_id": project.customer_id},
        request_context=get_request_context(request),
    )
    detail = BulkProjectDetailRead.model_validate(project)
    detail.rows = [row_read(r) for r in rows]
    return DataResponse(data=detail)


@router.get(
    "/{project_id}",
    response_model=DataResponse[BulkProjectDetailRead],
    summary="Get Project",
    description="Get a project with its rows in row order.",
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[BulkProjectDetailRead]:
    project = await _get_project_or_404(session, project_id, user)
    rows = await BulkRowRepository(session).list_for_project(project_id)
    detail = BulkProjectDetailRead.model_validate(project)
    detail.rows = [row_read(r) for r in rows]
    return DataResponse(data=detail)


@router.patch(
    "/{project_id}/rows/{row_id}",
    response_model=DataResponse[BulkRowRead],
    summary="Update Row",
    description="Edit a row's answer or move it through the review workflow.",
    responses={
        400: {"description": "Invalid workflow change"},
        404: {"description": "Project or row not found"},
    },
)
async def update_row(
    project_id: str,
    row_id: str,
    payload: BulkRowUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[BulkRowRead]:
    """
    Update a row.

    - **response**, **status**, **confidence**: Answer fields.
    - **user_edited_answer**: A reviewer's correction; audited as CORRECTED.
    - Workflow: flag, flag resolution, queue and review status fields.
    """
    row = await _get_row_or_404(session, project_id, row_id, user)
    before = row.model_dump()
    update_data = payload.model_dump(exclude_unset=True, mode="json")

    _keep_original_answer(row, update_data)
    for key, value in update_data.items():
        if key not in WORKFLOW_FIELDS:
            setattr(row, key, value)

    actions = apply_workflow_changes(row, {k: v for k, v in update_data.items() if k in WORKFLOW_FIELDS}, user)
    if update_data.get("user_edited_answer") is not None and AuditAction.corrected not in actions:
        actions.append(AuditAction.corrected)

    row = await BulkRowRepository(session).update(row)

    after = row.model_dump()
    context = get_request_context(request)
    details = {"project_id": project_id, "row_number": row.row_number}
    for action in actions:
        changes = None
        if action is AuditAction.corrected:
            changes = compute_changes(before, after, fields=CORRECTION_FIELDS)
        elif action is AuditAction.approved:
            changes = compute_changes(before, after, fields=("review_status",))
        await log_answer_change(
            session,
            action,
            row.id,
            _answer_title(row),
            user=user,
            changes=changes,
            details=details,
            request_context=context,
        )
    return DataResponse(data=row_read(row))


@router.post(
    "/{project_id}/rows/{row_id}",
    response_model=DataResponse[BulkRowRead],
    summary="Request Row Review",
    description="Send a row for review, optionally to a specific reviewer.",
    responses={404: {"description": "Project or row not found"}},
)
async def request_row_review(
    project_id: str,
    row_id: str,
    payload: ReviewRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[BulkRowRead]:
    row = await _get_row_or_404(session, project_id, row_id, user)
    action = request_review(
        row,
        user,
        note=payload.review_note,
        reviewer_id=payload.assigned_reviewer_id,
        reviewer_name=payload.assigned_reviewer_name,
    )
    row = await BulkRowRepository(session).update(row)

    await log_answer_change(
        session,
        action,
        row.id,
        _answer_title(row),
        user=user,
        details={
            "project_id": project_id,
            "row_number": row.row_number,
            "review_note": row.review_note,
            "assigned_reviewer_id": row.assigned_reviewer_id,
        },
        request_context=get_request_context(request),
    )
    return DataResponse(data=row_read(row))


@router.post(
    "/{project_id}/rows/{row_id}/clarify",
    response_model=DataResponse[ClarifyResult],
    summary="Record Clarify Conversation",
    description="Store the clarify conversation held about a row's answer. "
    "The first conversation on an unflagged row flags it for review.",
    responses={404: {"description": "Project or row not found"}},
)
async def record_clarify(
    project_id: str,
    row_id: str,
    payload: ClarifyRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[ClarifyResult]:
    project = await _get_project_or_404(session, project_id, user)
    row = await BulkRowRepository(session).get_in_project(project_id, row_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Row not found")

    first_clarify = not row.clarify_conversation
    auto_flagged = first_clarify and not row.flagged_for_review
    conversation = [message.model_dump() for message in payload.conversation]
    row.clarify_conversation = conversation
    if auto_flagged:
        apply_flag(row, True, user, note=CLARIFY_FLAG_NOTE)
    row = await BulkRowRepository(session).update(row)

    await log_answer_change(
        session,
        AuditAction.clarify_used,
        row.id,
        _answer_title(row),
        user=user,
        details={
            "project_id": project_id,
            "project_name": project.name,
            "row_number": row.row_number,
            "original_response": row.response,
            "user_message": payload.user_message or conversation[-1]["content"],
            "conversation_length": len(conversation),
            "first_clarify": first_clarify,
            "auto_flagged": auto_flagged,
        },
        request_context=get_request_context(request),
    )
    return DataResponse(data=ClarifyResult(row=row_read(row), auto_flagged=auto_flagged))


@router.get(
    "/{project_id}/feedback",
    response_model=DataResponse[ProjectFeedback],
    summary="Export Review Feedback",
    description="Rows whose generated answer or confidence was changed by a person, with project review stats.",
    responses={404: {"description": "Project not found"}},
)
async def export_feedback(
    project_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[ProjectFeedback]:
    project = await _get_project_or_404(session, project_id, user)
    rows = await BulkRowRepository(session).list_for_project(project_id)

    reviewed = (ReviewStatus.approved.value, ReviewStatus.corrected.value)
    stats = FeedbackStats(
        total_rows=len(rows),
        completed_rows=sum(1 for r in rows if r.status == RowStatus.completed.value),
        edited_responses=sum(1 for r in rows if r.original_response is not None),
        reviewed_rows=sum(1 for r in rows if r.review_status in reviewed),
        flagged_rows=sum(1 for r in rows if r.flagged_for_review),
    )
    feedback = [item for item in (_row_feedback(r) for r in rows) if item is not None]
    return DataResponse(
        data=ProjectFeedback(
            project_id=project.id,
            project_name=project.name,
            customer_name=project.customer_name,
            stats=stats,
            feedback=feedback,
        )
    )
