"""
Instruction Preset Endpoints.

Presets are reusable LLM instructions. They start private to their
author; sharing needs approval by a prompt admin (MANAGE_PROMPTS or ADMIN).
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import compute_changes, get_request_context, log_prompt_change
from transparent_trust.core.capabilities import has_any_capability
from transparent_trust.core.database import get_session, utc_now
from transparent_trust.core.database.entities.instruction_presets import InstructionPreset
from transparent_trust.core.database.repositories import InstructionPresetRepository
from transparent_trust.core.models.domain import AuditAction, Capability, CurrentUser, ShareStatus
from transparent_trust.core.models.io import (
    DataResponse,
    DeletedResponse,
    InstructionPresetCreate,
    InstructionPresetRead,
    InstructionPresetUpdate,
)
from transparent_trust.server.services.deps import require_user

router = APIRouter(tags=["instruction-presets"])

PROMPT_ADMIN_CAPABILITIES = (Capability.manage_prompts, Capability.admin)


def is_prompt_admin(user: CurrentUser) -> bool:
    return user.role == "ADMIN" or has_any_capability(user.capabilities, PROMPT_ADMIN_CAPABILITIES)


def _can_view(preset: InstructionPreset, user: CurrentUser) -> bool:
    if preset.created_by == user.id:
        return True
    if preset.is_shared and preset.share_status == ShareStatus.approved.value:
        return True
    return preset.share_status == ShareStatus.pending_approval.value and is_prompt_admin(user)


async def _get_preset_or_404(session: AsyncSession, preset_id: str) -> InstructionPreset:
    preset = await InstructionPresetRepository(session).get_by_id(preset_id)
    if preset is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Instruction preset not found")
    return preset


def _approve(preset: InstructionPreset, user: CurrentUser) -> None:
    now = utc_now()
    preset.share_status = ShareStatus.approved.value
    preset.is_shared = True
    preset.share_requested_at = preset.share_requested_at or now
    preset.approved_at = now
    preset.approved_by = user.id
    preset.rejected_at = None
    preset.rejected_by = None
    preset.rejection_reason = None


def _request_share(preset: InstructionPreset, user: CurrentUser) -> None:
    """Admins share immediately; everyone else waits for approval."""
    if is_prompt_admin(user):
        _approve(preset, user)
        return
    preset.share_status = ShareStatus.pending_approval.value
    preset.share_requested_at = utc_now()


def _withdraw_share(preset: InstructionPreset) -> None:
    preset.share_status = ShareStatus.private.value
    preset.is_shared = False
    preset.share_requested_at = None
    preset.rejected_at = None
    preset.rejected_by = None
    preset.rejection_reason = None


@router.get(
    "",
    response_model=DataResponse[List[InstructionPresetRead]],
    summary="List Instruction Presets",
    description="List the caller's own presets and approved shared presets.",
)
async def list_presets(
    include_pending: bool = False,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[List[InstructionPresetRead]]:
    """
    List visible presets.

    - **include_pending**: Also list presets awaiting approval (prompt admins only).
    """
    presets = await InstructionPresetRepository(session).list_visible(
        user.id, include_pending=include_pending and is_prompt_admin(user)
    )
    return DataResponse(data=[InstructionPresetRead.model_validate(p) for p in presets])


@router.post(
    "",
    response_model=DataResponse[InstructionPresetRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Instruction Preset",
)
async def create_preset(
    payload: InstructionPresetCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[InstructionPresetRead]:
    """
    Create a preset.

    - **name** / **content**: Required.
    - **request_share**: Share with the organization; prompt admins are approved immediately.
    """
    preset = InstructionPreset(
        name=payload.name,
        content=payload.content,
        description=payload.description,
        created_by=user.id,
        created_by_email=user.email,
    )
    if payload.request_share:
        _request_share(preset, user)
    preset = await InstructionPresetRepository(session).create(preset)

    await log_prompt_change(
        session,
        AuditAction.created,
        preset.id,
        preset.name,
        user=user,
        details={"kind": "instruction_preset", "share_status": preset.share_status},
        request_context=get_request_context(request),
    )
    return DataResponse(data=InstructionPresetRead.model_validate(preset))


@router.get(
    "/{preset_id}",
    response_model=DataResponse[InstructionPresetRead],
    summary="Get Instruction Preset",
    responses={403: {"description": "Preset not visible to the caller"}, 404: {"description": "Not found"}},
)
async def get_preset(
    preset_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[InstructionPresetRead]:
    preset = await _get_preset_or_404(session, preset_id)
    if not _can_view(preset, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return DataResponse(data=InstructionPresetRead.model_validate(preset))


@router.patch(
    "/{preset_id}",
    response_model=DataResponse[InstructionPresetRead],
    summary="Update Instruction Preset",
    description="Edit a preset (owner or prompt admin). Approval, rejection and the default flag are reserved for prompt admins.",
    responses={
        400: {"description": "Preset is not pending approval"},
        403: {"description": "Not allowed"},
        404: {"description": "Not found"},
    },
)
async def update_preset(
    preset_id: str,
    payload: InstructionPresetUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[InstructionPresetRead]:
    """
    Update a preset.

    - **share_status**: APPROVED or REJECTED to decide a pending share request (prompt admins).
    - **rejection_reason**: Stored with a rejection.
    - **request_share**: Ask to share (true) or withdraw the request (false); owner only.
    - **is_default**: Make this the default preset (prompt admins); clears any other default.
    """
    preset = await _get_preset_or_404(session, preset_id)
    admin = is_prompt_admin(user)
    owner = preset.created_by == user.id
    before = preset.model_dump()
    action = AuditAction.updated

    if payload.share_status in (ShareStatus.approved, ShareStatus.rejected):
        if not admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Prompt admin access required")
        if preset.share_status != ShareStatus.pending_approval.value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Preset is not pending approval")
        if payload.share_status is ShareStatus.approved:
            _approve(preset, user)
            action = AuditAction.approved
        else:
            preset.share_status = ShareStatus.rejected.value
            preset.is_shared = False
            preset.rejected_at = utc_now()
            preset.rejected_by = user.id
            preset.rejection_reason = payload.rejection_reason
            action = AuditAction.status_changed
    else:
        if not owner and not admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        if payload.is_default is not None and not admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Prompt admin access required")

        for key in ("name", "content", "description"):
            value = getattr(payload, key)
            if key in payload.model_fields_set and value is not None:
                setattr(preset, key, value)

        if payload.request_share is not None and owner:
            if payload.request_share and preset.share_status == ShareStatus.private.value:
                _request_share(preset, user)
            elif not payload.request_share and preset.share_status in (
                ShareStatus.pending_approval.value,
                ShareStatus.rejected.value,
            ):
                _withdraw_share(preset)

        if payload.is_default is not None:
            if payload.is_default:
                await session.execute(
                    update(InstructionPreset)
                    .where(InstructionPreset.is_default == True)  # noqa: E712
                    .where(InstructionPreset.id != preset.id)
                    .values(is_default=False)
                )
            preset.is_default = payload.is_default

    preset = await InstructionPresetRepository(session).update(preset)
    await log_prompt_change(
        session,
        action,
        preset.id,
        preset.name,
        user=user,
        changes=compute_changes(before, preset.model_dump()),
        details={"kind": "instruction_preset"},
        request_context=get_request_context(request),
    )
    return DataResponse(data=InstructionPresetRead.model_validate(preset))


@router.delete(
    "/{preset_id}",
    response_model=DataResponse[DeletedResponse],
    summary="Delete Instruction Preset",
    responses={403: {"description": "Not allowed"}, 404: {"description": "Not found"}},
)
async def delete_preset(
    preset_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[DeletedResponse]:
    preset = await _get_preset_or_404(session, preset_id)
    if preset.created_by != user.id and not is_prompt_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    name = preset.name
    await InstructionPresetRepository(session).delete(preset_id)
    await log_prompt_change(
        session,
        AuditAction.deleted,
        preset_id,
        name,
        user=user,
        details={"kind": "instruction_preset"},
        request_context=get_request_context(request),
    )
    return DataResponse(data=DeletedResponse())
