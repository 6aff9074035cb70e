"""
Customer Profile Endpoints.

Customer profiles hold the customer context used to fill templates and
draft answers. Writes append to the profile history, are audited and are
mirrored to git.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import compute_changes, get_request_context, log_customer_change
from transparent_trust.core.database import get_session
from transparent_trust.core.database.entities.customers import CustomerProfile
from transparent_trust.core.database.repositories import CustomerProfileRepository
from transparent_trust.core.git_sync import BaseGitSyncService, mirror_entity
from transparent_trust.core.models.domain import AuditAction, Capability, CurrentUser, HistoryAction
from transparent_trust.core.models.io import (
    CustomerProfileCreate,
    CustomerProfileRead,
    CustomerProfileUpdate,
    DataResponse,
    DeletedResponse,
    Pagination,
)
from transparent_trust.core.skills import append_history, history_entry
from transparent_trust.server.services.deps import get_customer_git_sync, require_capability, require_user

router = APIRouter(tags=["customers"])

manage_knowledge = require_capability(Capability.manage_knowledge)


async def _get_profile_or_404(session: AsyncSession, customer_id: str) -> CustomerProfile:
    profile = await CustomerProfileRepository(session).get_by_id(customer_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer profile not found")
    return profile


@router.get(
    "",
    response_model=DataResponse[List[CustomerProfileRead]],
    summary="List Customer Profiles",
    description="List customer profiles, most recently updated first.",
)
async def list_customers(
    active: Optional[bool] = None,
    industry: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[List[CustomerProfileRead]]:
    """
    List customer profiles.

    - **active**: Filter on the active flag.
    - **industry**: Exact industry filter.
    - **search**: Case-insensitive match on name, industry and overview.
    - **limit** / **offset**: Paging (limit at most 500).
    """
    profiles, total = await CustomerProfileRepository(session).list_profiles(
        active=active, industry=industry, search=search, limit=limit, offset=offset
    )
    return DataResponse(
        data=[CustomerProfileRead.model_validate(p) for p in profiles],
        pagination=Pagination.for_offset(total, limit, offset),
    )


@router.post(
    "",
    response_model=DataResponse[CustomerProfileRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Customer Profile",
    description="Create a customer profile. Requires MANAGE_KNOWLEDGE.",
)
async def create_customer(
    payload: CustomerProfileCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_customer_git_sync),
) -> DataResponse[CustomerProfileRead]:
    """
    Create a customer profile.

    - **name**: Customer name (required).
    - **overview**: Short narrative overview (required).
    """
    profile = CustomerProfile(
        **payload.model_dump(mode="json"),
        created_by=user.label,
        owner_id=user.id,
        history=[history_entry(HistoryAction.created, "Profile created", user)],
    )
    profile = await CustomerProfileRepository(session).create(profile)

    await log_customer_change(
        session,
        AuditAction.created,
        profile.id,
        profile.name,
        user=user,
        details={"industry": profile.industry},
        request_context=get_request_context(request),
    )
    await mirror_entity(session, profile, git_sync, "create", message=f"Create customer: {profile.name}", user=user)
    return DataResponse(data=CustomerProfileRead.model_validate(profile))


@router.get(
    "/{customer_id}",
    response_model=DataResponse[CustomerProfileRead],
    summary="Get Customer Profile",
    responses={404: {"description": "Customer profile not found"}},
)
async def get_customer(
    customer_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[CustomerProfileRead]:
    return DataResponse(data=CustomerProfileRead.model_validate(await _get_profile_or_404(session, customer_id)))


@router.put(
    "/{customer_id}",
    response_model=DataResponse[CustomerProfileRead],
    summary="Update Customer Profile",
    description="Update a customer profile. Requires MANAGE_KNOWLEDGE.",
    responses={404: {"description": "Customer profile not found"}},
)
async def update_customer(
    customer_id: str,
    payload: CustomerProfileUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_customer_git_sync),
) -> DataResponse[CustomerProfileRead]:
    """
    Update a customer profile.

    Only the fields sent are changed. With **is_refresh** the history entry
    records a refresh from sources instead of a manual update.
    """
    profile = await _get_profile_or_404(session, customer_id)
    before = profile.model_dump()
    old_slug = git_sync.generate_slug(profile)

    update_data = payload.model_dump(exclude_unset=True, exclude={"is_refresh"}, mode="json")
    for key, value in update_data.items():
        setattr(profile, key, value)

    changes = compute_changes(before, profile.model_dump(), fields=update_data.keys())
    if payload.is_refresh:
        entry = history_entry(HistoryAction.refreshed, "Profile refreshed from sources", user)
    else:
        summary = f"Updated {', '.join(changes)}" if changes else "Profile updated"
        entry = history_entry(HistoryAction.updated, summary, user)
    profile.history = append_history(profile.history, entry)
    profile = await CustomerProfileRepository(session).update(profile)

    await log_customer_change(
        session,
        AuditAction.updated,
        profile.id,
        profile.name,
        user=user,
        changes=changes,
        details={"is_refresh": payload.is_refresh},
        request_context=get_request_context(request),
    )
    await mirror_entity(
        session,
        profile,
        git_sync,
        "update",
        message=f"Update customer: {profile.name}",
        user=user,
        old_slug=old_slug,
    )
    return DataResponse(data=CustomerProfileRead.model_validate(profile))


@router.delete(
    "/{customer_id}",
    response_model=DataResponse[DeletedResponse],
    summary="Delete Customer Profile",
    description="Delete a customer profile that no project references. Requires MANAGE_KNOWLEDGE.",
    responses={
        400: {"description": "Profile is linked to projects"},
        404: {"description": "Customer profile not found"},
    },
)
async def delete_customer(
    customer_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_customer_git_sync),
) -> DataResponse[DeletedResponse]:
    repo = CustomerProfileRepository(session)
    profile = await _get_profile_or_404(session, customer_id)
    linked = await repo.count_linked_projects(customer_id)
    if linked:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Customer profile is linked to {linked} project(s) and cannot be deleted",
        )

    name = profile.name
    slug = git_sync.generate_slug(profile)
    await repo.delete(customer_id)
    await log_customer_change(
        session,
        AuditAction.deleted,
        customer_id,
        name,
        user=user,
        request_context=get_request_context(request),
    )
    await mirror_entity(session, profile, git_sync, "delete", message=f"Delete customer: {name}", user=user, old_slug=slug)
    return DataResponse(data=DeletedResponse())
