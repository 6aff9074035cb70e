"""
Auth Group Mapping Endpoints.

Admin CRUD for the SSO group to capability mappings used when resolving
the current user's capabilities. Every endpoint requires MANAGE_USERS.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import compute_changes, get_request_context, log_setting_change
from transparent_trust.core.capabilities import DEFAULT_GROUP_MAPPINGS, is_valid_capability
from transparent_trust.core.database import get_session
from transparent_trust.core.database.entities.auth_group_mappings import AuthGroupMapping
from transparent_trust.core.database.repositories import AuthGroupMappingRepository
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import AuditAction, Capability, CurrentUser
from transparent_trust.core.models.io import (
    AuthGroupMappingCreate,
    AuthGroupMappingRead,
    AuthGroupMappingUpdate,
    DataResponse,
    DeletedResponse,
    SeedResult,
)
from transparent_trust.server.core.config import settings
from transparent_trust.server.services.deps import require_capability

logger = get_logger(__name__)

router = APIRouter(tags=["auth-groups"])

manage_users = require_capability(Capability.manage_users)


def _valid_capabilities(values: List[str]) -> List[str]:
    valid = []
    for value in values:
        if is_valid_capability(value) and value not in valid:
            valid.append(value)
    return valid


async def _get_mapping_or_404(session: AsyncSession, mapping_id: str) -> AuthGroupMapping:
    mapping = await AuthGroupMappingRepository(session).get_by_id(mapping_id)
    if mapping is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group mapping not found")
    return mapping


@router.get(
    "",
    response_model=DataResponse[List[AuthGroupMappingRead]],
    summary="List Group Mappings",
    description="List SSO group mappings ordered by provider, then group id.",
)
async def list_mappings(
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_users),
) -> DataResponse[List[AuthGroupMappingRead]]:
    mappings = await AuthGroupMappingRepository(session).list_ordered()
    return DataResponse(data=[AuthGroupMappingRead.model_validate(m) for m in mappings])


@router.post(
    "",
    response_model=DataResponse[AuthGroupMappingRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Group Mapping",
    responses={400: {"description": "Mapping already exists for this provider and group"}},
)
async def create_mapping(
    payload: AuthGroupMappingCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_users),
) -> DataResponse[AuthGroupMappingRead]:
    """
    Map an SSO group to capabilities.

    - **provider**: Identity provider name, e.g. ``okta``.
    - **group_id**: Group identifier as sent by the provider.
    - **capabilities**: Capability names; unknown names are dropped.
    """
    repo = AuthGroupMappingRepository(session)
    if await repo.get_by_provider_group(payload.provider, payload.group_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A mapping for group {payload.group_id} already exists for {payload.provider}",
        )

    mapping = AuthGroupMapping(
        provider=payload.provider,
        group_id=payload.group_id,
        group_name=payload.group_name,
        capabilities=_valid_capabilities(payload.capabilities),
        is_active=payload.is_active,
    )
    mapping = await repo.create(mapping)
    await log_setting_change(
        session,
        AuditAction.created,
        mapping.id,
        mapping.group_name or mapping.group_id,
        user=user,
        details={"kind": "auth_group_mapping", "provider": mapping.provider, "capabilities": mapping.capabilities},
        request_context=get_request_context(request),
    )
    return DataResponse(data=AuthGroupMappingRead.model_validate(mapping))


@router.put(
    "",
    response_model=DataResponse[AuthGroupMappingRead],
    summary="Update Group Mapping",
    description="Update a mapping identified by the ``id`` in the body.",
    responses={404: {"description": "Group mapping not found"}},
)
async def update_mapping(
    payload: AuthGroupMappingUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_users),
) -> DataResponse[AuthGroupMappingRead]:
    mapping = await _get_mapping_or_404(session, payload.id)
    before = mapping.model_dump()

    if payload.group_name is not None:
        mapping.group_name = payload.group_name
    if payload.capabilities is not None:
        mapping.capabilities = _valid_capabilities(payload.capabilities)
    if payload.is_active is not None:
        mapping.is_active = payload.is_active
    mapping = await AuthGroupMappingRepository(session).update(mapping)

    await log_setting_change(
        session,
        AuditAction.updated,
        mapping.id,
        mapping.group_name or mapping.group_id,
        user=user,
        changes=compute_changes(before, mapping.model_dump()),
        details={"kind": "auth_group_mapping"},
        request_context=get_request_context(request),
    )
    return DataResponse(data=AuthGroupMappingRead.model_validate(mapping))


@router.delete(
    "",
    response_model=DataResponse[DeletedResponse],
    summary="Delete Group Mapping",
    responses={404: {"description": "Group mapping not found"}},
)
async def delete_mapping(
    request: Request,
    mapping_id: str = Query(alias="id", min_length=1),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_users),
) -> DataResponse[DeletedResponse]:
    mapping = await _get_mapping_or_404(session, mapping_id)
    title = mapping.group_name or mapping.group_id
    await AuthGroupMappingRepository(session).delete(mapping_id)
    await log_setting_change(
        session,
        AuditAction.deleted,
        mapping_id,
        title,
        user=user,
        details={"kind": "auth_group_mapping"},
        request_context=get_request_context(request),
    )
    return DataResponse(data=DeletedResponse())


@router.post(
    "/seed",
    response_model=DataResponse[SeedResult],
    summary="Seed Default Group Mappings",
    description="Insert the default group mappings that do not exist yet for a provider.",
)
async def seed_mappings(
    provider: Optional[str] = Query(default=None, min_length=1),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_users),
) -> DataResponse[SeedResult]:
    """
    Seed default mappings.

    - **provider**: Provider to seed for; defaults to the configured SSO provider.
    """
    provider = provider or settings.auth_default_provider
    repo = AuthGroupMappingRepository(session)
    result = SeedResult()

    for default in DEFAULT_GROUP_MAPPINGS:
        group_id = str(default["group_id"])
        if await repo.get_by_provider_group(provider, group_id) is not None:
            result.skipped.append(group_id)
            continue
        await repo.create(
            AuthGroupMapping(
                provider=provider,
                group_id=group_id,
                group_name=str(default["group_name"]),
                capabilities=[Capability(c).value for c in default["capabilities"]],  # type: ignore[union-attr]
            )
        )
        result.created.append(group_id)

    logger.info(f"Seeded group mappings for {provider}: {len(result.created)} created, {len(result.skipped)} skipped")
    return DataResponse(data=result)
