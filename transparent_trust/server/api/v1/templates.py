"""
Template Endpoints.

CRUD for document templates plus the fill endpoint, which resolves
placeholders locally and asks the LLM for any ``{{llm:...}}`` sections.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.audit import compute_changes, get_request_context, log_template_change
from transparent_trust.core.database import get_session
from transparent_trust.core.database.entities.templates import Template
from transparent_trust.core.database.repositories import (
    CustomerProfileRepository,
    SkillRepository,
    TemplateRepository,
)
from transparent_trust.core.git_sync import BaseGitSyncService, mirror_entity
from transparent_trust.core.llm import LLMService
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import AuditAction, Capability, CurrentUser
from transparent_trust.core.models.io import (
    DataResponse,
    DeletedResponse,
    TemplateCreate,
    TemplateDetailRead,
    TemplateFillRequest,
    TemplateFillResponse,
    TemplateRead,
    TemplateSummary,
    TemplateUpdate,
)
from transparent_trust.core.prompts import load_system_prompt
from transparent_trust.core.templating import (
    TemplateFillContext,
    build_llm_fill_prompt,
    extract_placeholder_hints,
    fill_template,
    parse_placeholders,
)
from transparent_trust.server.services.deps import (
    get_llm_service,
    get_template_git_sync,
    rate_limit,
    require_capability,
    require_user,
)

logger = get_logger(__name__)

router = APIRouter(tags=["templates"])

FILL_TEMPERATURE = 0.3
FILL_MAX_TOKENS = 4000

_FILL_FALLBACK_PROMPT = (
    "You are an expert at creating professional sales and marketing documents. "
    "Fill template placeholders with accurate, specific content based on the provided context."
)

manage_knowledge = require_capability(Capability.manage_knowledge)


async def _get_template_or_404(session: AsyncSession, template_id: str) -> Template:
    template = await TemplateRepository(session).get_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return template


@router.get(
    "",
    response_model=DataResponse[List[TemplateRead]],
    summary="List Templates",
    description="List templates ordered by sort order, then name.",
)
async def list_templates(
    category: Optional[str] = None,
    active_only: bool = True,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[List[TemplateRead]]:
    """
    List templates.

    - **category**: Only templates of this category.
    - **active_only**: Hide inactive templates (default true).
    """
    templates = await TemplateRepository(session).list_templates(category=category, active_only=active_only)
    return DataResponse(data=[TemplateRead.model_validate(t) for t in templates])


@router.post(
    "",
    response_model=DataResponse[TemplateRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create Template",
    description="Create a template. Requires MANAGE_KNOWLEDGE.",
    responses={
        201: {"description": "Template created"},
        400: {"description": "Invalid template data"},
        403: {"description": "Missing capability"},
    },
)
async def create_template(
    payload: TemplateCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_template_git_sync),
) -> DataResponse[TemplateRead]:
    """
    Create a new template.

    - **name**: Display name (1-200 characters).
    - **content**: Markdown body with ``{{type.field}}`` placeholders.
    - **output_format**: markdown, docx or pdf.
    """
    template = Template(
        **payload.model_dump(exclude={"output_format"}),
        output_format=payload.output_format.value,
        created_by=user.label,
        updated_by=user.label,
    )
    template = await TemplateRepository(session).create(template)

    await log_template_change(
        session,
        AuditAction.created,
        template.id,
        template.name,
        user=user,
        details={"category": template.category, "output_format": template.output_format},
        request_context=get_request_context(request),
    )
    await mirror_entity(session, template, git_sync, "create", message=f"Create template: {template.name}", user=user)
    return DataResponse(data=TemplateRead.model_validate(template))


@router.post(
    "/fill",
    response_model=DataResponse[TemplateFillResponse],
    summary="Fill Template",
    description="Fill a template's placeholders from customer, skill, GTM and custom data, using the LLM for llm placeholders.",
    responses={
        400: {"description": "Template is inactive"},
        404: {"description": "Template not found"},
        429: {"description": "Rate limit exceeded"},
    },
    dependencies=[Depends(rate_limit("llm"))],
)
async def fill_template_endpoint(
    payload: TemplateFillRequest,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
    llm: LLMService = Depends(get_llm_service),
) -> DataResponse[TemplateFillResponse]:
    """
    Fill a template.

    - **template_id**: Template to fill.
    - **customer_id**: Customer profile used by ``{{customer.*}}`` placeholders.
    - **skill_ids**: Skills used by ``{{skill.*}}`` placeholders, in order.
    - **gtm_data**: Calls, activities and metrics used by ``{{gtm.*}}`` placeholders.
    - **custom_values**: Values for ``{{custom.*}}`` placeholders.
    - **instructions**: Extra guidance for the LLM sections.
    """
    template = await _get_template_or_404(session, payload.template_id)
    if not template.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Template is not active")

    customer = None
    if payload.customer_id:
        profile = await CustomerProfileRepository(session).get_by_id(payload.customer_id)
        if profile is not None:
            customer = profile.model_dump()

    skills = []
    if payload.skill_ids:
        skills = [s.model_dump() for s in await SkillRepository(session).get_many(payload.skill_ids)]

    context = TemplateFillContext(
        customer=customer,
        gtm=payload.gtm_data,
        skills=skills,
        custom=payload.custom_values,
    )
    result = fill_template(template.content, context)
    filled_content = result.content
    missing = list(result.placeholders_missing)
    llm_sections: List[str] = []

    if result.llm_placeholders:
        system_prompt = await load_system_prompt(session, "template_fill", _FILL_FALLBACK_PROMPT)
        user_prompt = build_llm_fill_prompt(filled_content, result.llm_placeholders, context, payload.instructions)
        completion = await llm.complete(
            system_prompt,
            user_prompt,
            temperature=FILL_TEMPERATURE,
            max_tokens=FILL_MAX_TOKENS,
            feature="templates-fill",
            user=user,
        )
        filled_content = completion.text.strip()
        llm_sections = [p.full_match for p in result.llm_placeholders]

        for placeholder in parse_placeholders(filled_content):
            if placeholder.full_match not in missing:
                missing.append(placeholder.full_match)

    logger.info(
        f"Filled template {template.id}: {len(result.placeholders_resolved)} resolved, "
        f"{len(missing)} missing, {len(llm_sections)} generated"
    )
    return DataResponse(
        data=TemplateFillResponse(
            filled_content=filled_content,
            output_format=template.output_format,
            placeholders_used=result.placeholders_resolved,
            placeholders_missing=missing,
            llm_generated_sections=llm_sections,
            template=TemplateSummary(id=template.id, name=template.name, category=template.category),
        )
    )


@router.get(
    "/{template_id}",
    response_model=DataResponse[TemplateDetailRead],
    summary="Get Template",
    description="Get a template with a hint for each placeholder it contains.",
    responses={404: {"description": "Template not found"}},
)
async def get_template(
    template_id: str,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(require_user),
) -> DataResponse[TemplateDetailRead]:
    template = await _get_template_or_404(session, template_id)
    detail = TemplateDetailRead.model_validate(template)
    detail.placeholder_hints = extract_placeholder_hints(template.content)
    return DataResponse(data=detail)


@router.patch(
    "/{template_id}",
    response_model=DataResponse[TemplateRead],
    summary="Update Template",
    description="Partially update a template. Requires MANAGE_KNOWLEDGE.",
    responses={404: {"description": "Template not found"}},
)
async def update_template(
    template_id: str,
    payload: TemplateUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_template_git_sync),
) -> DataResponse[TemplateRead]:
    template = await _get_template_or_404(session, template_id)
    before = template.model_dump()
    old_slug = git_sync.generate_slug(template)

    update_data = payload.model_dump(exclude_unset=True, mode="json")
    for key, value in update_data.items():
        setattr(template, key, value)
    template.updated_by = user.label
    template = await TemplateRepository(session).update(template)

    changes = compute_changes(before, template.model_dump(), fields=update_data.keys())
    await log_template_change(
        session,
        AuditAction.updated,
        template.id,
        template.name,
        user=user,
        changes=changes,
        request_context=get_request_context(request),
    )
    await mirror_entity(
        session,
        template,
        git_sync,
        "update",
        message=f"Update template: {template.name}",
        user=user,
        old_slug=old_slug,
    )
    return DataResponse(data=TemplateRead.model_validate(template))


@router.delete(
    "/{template_id}",
    response_model=DataResponse[DeletedResponse],
    summary="Delete Template",
    description="Delete a template. Requires MANAGE_KNOWLEDGE.",
    responses={404: {"description": "Template not found"}},
)
async def delete_template(
    template_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(manage_knowledge),
    git_sync: BaseGitSyncService = Depends(get_template_git_sync),
) -> DataResponse[DeletedResponse]:
    template = await _get_template_or_404(session, template_id)
    name = template.name
    slug = git_sync.generate_slug(template)

    await TemplateRepository(session).delete(template_id)
    await log_template_change(
        session,
        AuditAction.deleted,
        template_id,
        name,
        user=user,
        request_context=get_request_context(request),
    )
    await mirror_entity(session, template, git_sync, "delete", message=f"Delete template: {name}", user=user, old_slug=slug)
    return DataResponse(data=DeletedResponse())
