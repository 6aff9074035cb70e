"""
Best-effort git mirroring of database writes.

The database is the source of truth. A failed git operation is logged and
recorded on the entity as ``sync_status=FAILED``; it never fails the
request that triggered it.
"""

from __future__ import annotations

import asyncio
from typing import Any, Literal, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.database.base import utc_now
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import CurrentUser, SyncStatus
from transparent_trust.core.monitoring import log_git_sync
from transparent_trust.server.core.config import GitSyncConfig, settings

from .base import BaseGitSyncService, GitAuthor

logger = get_logger(__name__)

MirrorOperation = Literal["create", "update", "delete"]


def author_for(user: Optional[CurrentUser], config: Optional[GitSyncConfig] = None) -> GitAuthor:
    """Commit author for ``user``, falling back to the configured service identity."""
    config = config or settings.git_sync
    if user is None:
        return GitAuthor(name=config.author_name, email=config.author_email)
    return GitAuthor(name=user.name or user.email or user.id, email=user.email or config.author_email)


def _run_operation(
    service: BaseGitSyncService,
    entity: Any,
    operation: MirrorOperation,
    slug: str,
    message: str,
    author: GitAuthor,
    config: GitSyncConfig,
) -> Optional[str]:
    if operation == "create":
        sha = service.save_and_commit(slug, entity, message, author)
    elif operation == "update":
        sha = service.update_and_commit(slug, entity, message, author)
    elif operation == "delete":
        sha = service.delete_and_commit(slug, message, author)
    else:
        raise ValueError(f"Unknown git mirror operation: {operation}")

    if sha and config.auto_push:
        service.push_to_remote(config.remote)
    return sha


async def mirror_entity(
    session: AsyncSession,
    entity: Any,
    service: BaseGitSyncService,
    operation: MirrorOperation,
    *,
    message: str,
    user: Optional[CurrentUser] = None,
    old_slug: Optional[str] = None,
    config: Optional[GitSyncConfig] = None,
) -> Optional[str]:
    """
    Mirror one entity write to git.

    Args:
        session: Session the entity belongs to; used to persist the sync status
        entity: Template, CustomerProfile or Skill
        service: Git sync service for the entity kind
        operation: ``create``, ``update`` or ``delete``
        message: Commit message
        user: Commit author
        old_slug: Slug before an update, so a renamed entity moves its file
        config: Git sync configuration, defaults to the application settings

    Returns:
        The commit sha, or None when disabled, unchanged or failed.
    """
    config = config or settings.git_sync
    if not config.enabled:
        return None

    slug = old_slug or service.generate_slug(entity)
    author = author_for(user, config)
    try:
        sha = await asyncio.to_thread(_run_operation, service, entity, operation, slug, message, author, config)
    except Exception as e:
        logger.error(f"Git sync failed for {service.kind.lower()} {slug!r} ({operation}): {e}")
        log_git_sync(service.kind.lower(), slug, operation, success=False)
        if operation != "delete":
            entity.sync_status = SyncStatus.failed.value
            await session.commit()
        return None

    log_git_sync(service.kind.lower(), slug, operation, success=True, commit_sha=sha)
    if operation != "delete":
        entity.sync_status = SyncStatus.synced.value
        if sha:
            entity.git_commit_sha = sha
        if hasattr(entity, "last_synced_at"):
            entity.last_synced_at = utc_now()
        await session.commit()
    return sha
