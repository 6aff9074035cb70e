"""
Skill Endpoints.

CRUD for knowledge skills, refreshing a skill from its source URLs (a
two-step draft then apply flow), LLM-assisted merging, and the git
history of a skill's mirrored file.
"""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import compute_changes, get_request_context, log_skill_change
from transparent_trust.core.database import get_session, utc_now
from transparent_trust.core.database.entities.skills import Skill
from transparent_trust.core.database.repositories import SkillRepository
from transparent_trust.core.git_sync import BaseGitSyncService, mirror_entity
from transparent_trust.core.llm import LLMService
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import AuditAction, Capability, CurrentUser, HistoryAction
from transparent_trust.core.models.io import (
    DataResponse,
    DeletedResponse,
    SkillCreate,
    SkillHistoryCommit,
    SkillMergeRequest,
    SkillRead,
    SkillRefreshApply,
    SkillRefreshResult,
    SkillUpdate,
)
from transparent_trust.core.skills import (
    MergedSkill,
    SkillRefreshError,
    append_history,
    build_source_material,
    generate_draft_update,
    history_entry,
    mark_sources_fetched,
    merge_skills,
    source_url_strings,
)
from transparent_trust.server.core.config import settings
from transparent_trust.server.services.deps import (
    get_llm_service,
    get_skill_git_sync,
    get_url_fetcher,
    rate_limit,
    require_capability,
    require_user,
)

logger = get_logger(__name__)

router = APIRouter(tags=["skills"])

manage_knowledge = require_capability(Capability.manage_knowledge)

NO_CHANGES_MESSAGE = "No changes detected - skill is up to date"


async def _get_skill_or_404(session: AsyncSession, skill_id: str) -> Skill:
    skill = await SkillRepository(session).get_by_id(skill_id)
    if skill is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Skill not found")
    return skill


@router.get(
    "",
    response_model=DataResponse[List[SkillRead]],
    summary="List Skills",
    description="List skills, most recently updated first.",
)
async def list_skills(
    active: Optional[bool] = True,
    category: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[List[SkillRead]]:
    """
    List skills.

    - **active**: Only active (default) or inactive skills.
    - **category**: Only skills tagged with this category.
    - **limit**: At most 500.
    """
    skills = await SkillRepository(session).list_skills(active=active, category=category, limit=limit)
    return DataResponse(data=[SkillRead.model_validate(s) for s in skills])


@router.post(
    "",
    response_model=DataResponse[SkillRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Skill",
    description="Create a skill. Requires MANAGE_KNOWLEDGE.",
)
async def create_skill(
    payload: SkillCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_skill_git_sync),
) -> DataResponse[SkillRead]:
    now = utc_now()
    data = payload.model_dump(mode="json")
    data["source_urls"] = [{**s, "added_at": s.get("added_at") or now.isoformat()} for s in data["source_urls"]]
    skill = Skill(
        **data,
        created_by=user.label,
        history=[history_entry(HistoryAction.created, "Skill created", user, now=now)],
    )
    skill = await SkillRepository(session).create(skill)

    await log_skill_change(
        session,
        AuditAction.created,
        skill.id,
        skill.title,
        user=user,
        details={"categories": skill.categories},
        request_context=get_request_context(request),
    )
    await mirror_entity(session, skill, git_sync, "create", message=f"Create skill: {skill.title}", user=user)
    return DataResponse(data=SkillRead.model_validate(skill))


@router.post(
    "/merge",
    response_model=DataResponse[MergedSkill],
    summary="Merge Skills",
    description="Merge several skills into one document with the LLM. Nothing is saved.",
    responses={400: {"description": "Nothing to merge"}, 429: {"description": "Rate limit exceeded"}},
    dependencies=[Depends(rate_limit("llm"))],
)
async def merge_skills_endpoint(
    payload: SkillMergeRequest,
    user: CurrentUser = Depends(require_user),
    llm: LLMService = Depends(get_llm_service),
) -> DataResponse[MergedSkill]:
    """
    Merge skills.

    - **target_skill**: The skill the others are merged into.
    - **skills_to_merge**: One or more skills folded into the target.
    """
    if payload.target_skill is None or not payload.skills_to_merge:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="target_skill and a non-empty skills_to_merge are required",
        )
    try:
        merged = await merge_skills(llm, payload.target_skill, payload.skills_to_merge, user=user)
    except SkillRefreshError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e
    return DataResponse(data=merged)


@router.get(
    "/{skill_id}",
    response_model=DataResponse[SkillRead],
    summary="Get Skill",
    responses={404: {"description": "Skill not found"}},
)
async def get_skill(
    skill_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[SkillRead]:
    return DataResponse(data=SkillRead.model_validate(await _get_skill_or_404(session, skill_id)))


@router.patch(
    "/{skill_id}",
    response_model=DataResponse[SkillRead],
    summary="Update Skill",
    description="Partially update a skill. Requires MANAGE_KNOWLEDGE.",
    responses={404: {"description": "Skill not found"}},
)
async def update_skill(
    skill_id: str,
    payload: SkillUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_skill_git_sync),
) -> DataResponse[SkillRead]:
    skill = await _get_skill_or_404(session, skill_id)
    before = skill.model_dump()
    old_slug = git_sync.generate_slug(skill)

    update_data = payload.model_dump(exclude_unset=True, mode="json")
    for key, value in update_data.items():
        setattr(skill, key, value)

    changes = compute_changes(before, skill.model_dump(), fields=update_data.keys())
    summary = f"Updated {', '.join(changes)}" if changes else "Skill updated"
    skill.history = append_history(skill.history, history_entry(HistoryAction.updated, summary, user))
    skill = await SkillRepository(session).update(skill)

    await log_skill_change(
        session,
        AuditAction.updated,
        skill.id,
        skill.title,
        user=user,
        changes=changes,
        request_context=get_request_context(request),
    )
    await mirror_entity(
        session, skill, git_sync, "update", message=f"Update skill: {skill.title}", user=user, old_slug=old_slug
    )
    return DataResponse(data=SkillRead.model_validate(skill))


@router.delete(
    "/{skill_id}",
    response_model=DataResponse[DeletedResponse],
    summary="Delete Skill",
    description="Delete a skill. Requires MANAGE_KNOWLEDGE.",
    responses={404: {"description": "Skill not found"}},
)
async def delete_skill(
    skill_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_skill_git_sync),
) -> DataResponse[DeletedResponse]:
    skill = await _get_skill_or_404(session, skill_id)
    title = skill.title
    slug = git_sync.generate_slug(skill)

    await SkillRepository(session).delete(skill_id)
    await log_skill_change(
        session,
        AuditAction.deleted,
        skill_id,
        title,
        user=user,
        request_context=get_request_context(request),
    )
    await mirror_entity(session, skill, git_sync, "delete", message=f"Delete skill: {title}", user=user, old_slug=slug)
    return DataResponse(data=DeletedResponse())


@router.post(
    "/{skill_id}/refresh",
    response_model=DataResponse[SkillRefreshResult],
    summary="Refresh Skill From Sources",
    description="Re-read the skill's source URLs and propose a draft update for review.",
    responses={
        400: {"description": "Skill has no sources, or none could be loaded"},
        404: {"description": "Skill not found"},
        429: {"description": "Rate limit exceeded"},
    },
    dependencies=[Depends(rate_limit("llm"))],
)
async def refresh_skill(
    skill_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    llm: LLMService = Depends(get_llm_service),
    fetcher: Callable = Depends(get_url_fetcher),
) -> DataResponse[SkillRefreshResult]:
    """
    Refresh a skill.

    Without meaningful changes the skill is stamped as refreshed and only a
    message is returned. Otherwise the draft is returned next to the
    original title and content; apply it with ``PUT /skills/{id}/refresh``.
    """
    skill = await _get_skill_or_404(session, skill_id)
    urls = source_url_strings(skill.source_urls)
    if not urls:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Skill has no source URLs to refresh from")

    try:
        material = await build_source_material(urls, fetcher)
    except SkillRefreshError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        draft = await generate_draft_update(llm, skill, material, urls, user=user)
    except SkillRefreshError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e

    if not draft.has_changes:
        now = utc_now()
        skill.last_refreshed_at = now
        skill.source_urls = mark_sources_fetched(skill.source_urls, now)
        skill.history = append_history(
            skill.history, history_entry(HistoryAction.refreshed, "Refreshed from sources - no changes", user, now=now)
        )
        await SkillRepository(session).update(skill)
        logger.info(f"Skill {skill_id} refreshed without changes")
        return DataResponse(data=SkillRefreshResult(has_changes=False, message=NO_CHANGES_MESSAGE))

    return DataResponse(
        data=SkillRefreshResult(
            has_changes=True,
            draft=draft,
            original_title=skill.title,
            original_content=skill.content,
        )
    )


@router.put(
    "/{skill_id}/refresh",
    response_model=DataResponse[SkillRead],
    summary="Apply Skill Refresh",
    description="Apply a reviewed refresh draft to the skill.",
    responses={400: {"description": "Title or content missing"}, 404: {"description": "Skill not found"}},
)
async def apply_refresh(
    skill_id: str,
    payload: SkillRefreshApply,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_skill_git_sync),
) -> DataResponse[SkillRead]:
    """
    Apply a refresh draft.

    - **title** / **content**: The accepted text (both required).
    - **change_highlights**: Recorded in the history entry.
    """
    if not payload.title or not payload.content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="title and content are required")

    skill = await _get_skill_or_404(session, skill_id)
    before = skill.model_dump()
    old_slug = git_sync.generate_slug(skill)
    now = utc_now()

    skill.title = payload.title
    skill.content = payload.content
    skill.last_refreshed_at = now
    skill.source_urls = mark_sources_fetched(skill.source_urls, now)
    summary = "Refreshed from sources"
    if payload.change_highlights:
        summary = f"{summary}: {'; '.join(payload.change_highlights)}"
    skill.history = append_history(skill.history, history_entry(HistoryAction.refreshed, summary, user, now=now))
    skill = await SkillRepository(session).update(skill)

    await log_skill_change(
        session,
        AuditAction.refreshed,
        skill.id,
        skill.title,
        user=user,
        changes=compute_changes(before, skill.model_dump(), fields=("title", "content")),
        details={"change_highlights": payload.change_highlights},
        request_context=get_request_context(request),
    )
    await mirror_entity(
        session, skill, git_sync, "update", message=f"Refresh skill: {skill.title}", user=user, old_slug=old_slug
    )
    return DataResponse(data=SkillRead.model_validate(skill))


@router.get(
    "/{skill_id}/history",
    response_model=DataResponse[List[SkillHistoryCommit]],
    summary="Skill Git History",
    description="Commits touching the skill's mirrored file, newest first. Empty when git sync is disabled.",
    responses={404: {"description": "Skill not found"}},
)
async def skill_history(
    skill_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
    git_sync: BaseGitSyncService = Depends(get_skill_git_sync),
) -> DataResponse[List[SkillHistoryCommit]]:
    skill = await _get_skill_or_404(session, skill_id)
    if not settings.git_sync.enabled:
        return DataResponse(data=[])

    commits = await asyncio.to_thread(git_sync.get_history, git_sync.generate_slug(skill), limit)
    return DataResponse(data=[SkillHistoryCommit(**vars(c)) for c in commits])
