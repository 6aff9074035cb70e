"""
Audit logging helpers.

Every mutating API operation records who changed what. Audit writes are
best-effort: a failure is logged and swallowed so it never fails the
operation being audited.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from transparent_trust.core.database.entities.audit_logs import AuditLog
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import AuditAction, AuditEntityType, CurrentUser

logger = get_logger(__name__)

IGNORED_CHANGE_FIELDS = frozenset({"created_at", "updated_at"})

Changes = Dict[str, Dict[str, Any]]


@dataclass(frozen=True)
class RequestContext:
    """Client network details attached to an audit entry."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def get_request_context(request: Optional[Request]) -> RequestContext:
    """
    Extract the client IP and user agent from a request.

    The IP is taken from the first ``x-forwarded-for`` entry, then
    ``x-real-ip``, then ``cf-connecting-ip``.
    """
    if request is None:
        return RequestContext()

    headers = request.headers
    ip_address: Optional[str] = None
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip() or None
    elif headers.get("x-real-ip"):
        ip_address = headers.get("x-real-ip")
    elif headers.get("cf-connecting-ip"):
        ip_address = headers.get("cf-connecting-ip")

    return RequestContext(ip_address=ip_address, user_agent=headers.get("user-agent"))


def _encode(value: Any) -> str:
    return json.dumps(to_jsonable_python(value), sort_keys=True)


def compute_changes(
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    fields: Optional[Iterable[str]] = None,
) -> Changes:
    """
    Diff two snapshots of a record.

    Args:
        before: Field values before the change
        after: Field values after the change
        fields: Restrict the diff to these fields (optional)

    Returns:
        ``{field: {"from": old, "to": new}}`` for every field whose JSON
        encoding differs. Values are JSON-safe.
    """
    tracked = set(fields) if fields is not None else None
    changes: Changes = {}
    for key in list(dict.fromkeys([*before.keys(), *after.keys()])):
        if tracked is not None and key not in tracked:
            continue
        if key in IGNORED_CHANGE_FIELDS:
            continue
        old = to_jsonable_python(before.get(key))
        new = to_jsonable_python(after.get(key))
        if _encode(old) != _encode(new):
            changes[key] = {"from": old, "to": new}
    return changes


async def create_audit_log(
    session: AsyncSession,
    *,
    entity_type: AuditEntityType,
    entity_id: str,
    action: AuditAction,
    entity_title: Optional[str] = None,
    user: Optional[CurrentUser] = None,
    changes: Optional[Changes] = None,
    details: Optional[Dict[str, Any]] = None,
    request_context: Optional[RequestContext] = None,
) -> Optional[AuditLog]:
    """
    Persist an audit entry.

    Returns:
        The stored entry, or None when it could not be written.
    """
    context = request_context or RequestContext()
    entry = AuditLog(
        entity_type=AuditEntityType(entity_type).value,
        entity_id=entity_id,
        entity_title=entity_title,
        action=AuditAction(action).value,
        user_id=user.id if user else None,
        user_name=user.name if user else None,
        user_email=user.email if user else None,
        changes=changes or None,
        details=to_jsonable_python(details) if details else None,
        ip_address=context.ip_address,
        user_agent=context.user_agent,
    )
    try:
        session.add(entry)
        await session.commit()
        return entry
    except Exception as e:
        logger.error(
            f"Failed to create audit log for {entry.entity_type}:{entry.entity_id} ({entry.action}): {e}",
            exc_info=True,
        )
        await session.rollback()
        return None


async def _log_entity_change(
    entity_type: AuditEntityType,
    session: AsyncSession,
    action: AuditAction,
    entity_id: str,
    entity_title: Optional[str],
    user: Optional[CurrentUser] = None,
    changes: Optional[Changes] = None,
    details: Optional[Dict[str, Any]] = None,
    request_context: Optional[RequestContext] = None,
) -> Optional[AuditLog]:
    return await create_audit_log(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_title=entity_title,
        action=action,
        user=user,
        changes=changes,
        details=details,
        request_context=request_context,
    )


async def log_skill_change(session: AsyncSession, action: AuditAction, skill_id: str, title: Optional[str], **kwargs):
    return await _log_entity_change(AuditEntityType.skill, session, action, skill_id, title, **kwargs)


async def log_customer_change(
    session: AsyncSession, action: AuditAction, customer_id: str, name: Optional[str], **kwargs
):
    return await _log_entity_change(AuditEntityType.customer, session, action, customer_id, name, **kwargs)


async def log_template_change(
    session: AsyncSession, action: AuditAction, template_id: str, name: Optional[str], **kwargs
):
    return await _log_entity_change(AuditEntityType.template, session, action, template_id, name, **kwargs)


async def log_project_change(session: AsyncSession, action: AuditAction, project_id: str, name: Optional[str], **kwargs):
    return await _log_entity_change(AuditEntityType.project, session, action, project_id, name, **kwargs)


async def log_answer_change(session: AsyncSession, action: AuditAction, answer_id: str, title: Optional[str], **kwargs):
    """Audit a change to an answer (a bulk project row)."""
    return await _log_entity_change(AuditEntityType.answer, session, action, answer_id, title, **kwargs)


async def log_collateral_change(
    session: AsyncSession, action: AuditAction, collateral_id: str, name: Optional[str], **kwargs
):
    return await _log_entity_change(AuditEntityType.collateral, session, action, collateral_id, name, **kwargs)


async def log_setting_change(session: AsyncSession, action: AuditAction, setting_id: str, name: Optional[str], **kwargs):
    return await _log_entity_change(AuditEntityType.setting, session, action, setting_id, name, **kwargs)


async def log_prompt_change(session: AsyncSession, action: AuditAction, prompt_id: str, name: Optional[str], **kwargs):
    """Audit a change to a prompt block or instruction preset."""
    return await _log_entity_change(AuditEntityType.prompt, session, action, prompt_id, name, **kwargs)
