"""
API Dependencies.

Identity, authorization, rate limiting and service providers for the
routers. Identity is asserted by the upstream SSO proxy through request
headers; capabilities come from the user's role merged with the active
group mappings of their SSO groups.
"""

from typing import Annotated, Callable, List, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from transparent_trust.core.capabilities import (
    has_any_capability,
    is_valid_capability,
    merge_capabilities,
    role_to_capabilities,
)
from transparent_trust.core.database import get_session
from transparent_trust.core.database.repositories import AuthGroupMappingRepository
from transparent_trust.core.git_sync import (
    BaseGitSyncService,
    customer_git_sync,
    skill_git_sync,
    template_git_sync,
)
from transparent_trust.core.http_fetch import fetch_url_content
from transparent_trust.core.llm import LLMService
from transparent_trust.core.logging_config import get_logger
from transparent_trust.core.models.domain import Capability, CurrentUser
from transparent_trust.core.rate_limit import check_rate_limit, get_rate_limit_identifier
from transparent_trust.server.core.config import settings

logger = get_logger(__name__)

USER_ID_HEADER = "x-user-id"
USER_EMAIL_HEADER = "x-user-email"
USER_NAME_HEADER = "x-user-name"
USER_ROLE_HEADER = "x-user-role"
USER_GROUPS_HEADER = "x-user-groups"
AUTH_PROVIDER_HEADER = "x-auth-provider"


def _parse_groups(raw: Optional[str]) -> List[str]:
    return [g.strip() for g in (raw or "").split(",") if g.strip()]


async def get_current_user(request: Request, session: AsyncSession = Depends(get_session)) -> Optional[CurrentUser]:
    """Resolve the caller from the SSO proxy headers, or None when unauthenticated."""
    headers = request.headers
    user_id = (headers.get(USER_ID_HEADER) or "").strip()
    if not user_id:
        return None

    role = (headers.get(USER_ROLE_HEADER) or "USER").strip().upper()
    groups = _parse_groups(headers.get(USER_GROUPS_HEADER))
    provider = (headers.get(AUTH_PROVIDER_HEADER) or settings.auth_default_provider).strip()

    group_capabilities: List[str] = []
    if groups:
        mappings = await AuthGroupMappingRepository(session).list_active_for_groups(provider, groups)
        group_capabilities = [c for m in mappings for c in m.capabilities or [] if is_valid_capability(c)]

    return CurrentUser(
        id=user_id,
        email=headers.get(USER_EMAIL_HEADER) or None,
        name=headers.get(USER_NAME_HEADER) or None,
        role=role,
        groups=groups,
        capabilities=merge_capabilities(role_to_capabilities(role), group_capabilities),
    )


async def require_user(user: Optional[CurrentUser] = Depends(get_current_user)) -> CurrentUser:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def require_capability(*capabilities: Capability) -> Callable:
    """Dependency factory: the caller must hold any of ``capabilities``."""

    async def _require(user: CurrentUser = Depends(require_user)) -> CurrentUser:
        if not has_any_capability(user.capabilities, capabilities):
            needed = " or ".join(c.value for c in capabilities)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Requires capability {needed}")
        return user

    return _require


def rate_limit(name: str = "standard") -> Callable:
    """Dependency factory enforcing the named rate limiter for the caller."""

    async def _check(request: Request, user: Optional[CurrentUser] = Depends(get_current_user)) -> None:
        if not settings.rate_limit.enabled:
            return
        identifier = get_rate_limit_identifier(request, user.id if user else None)
        result = check_rate_limit(identifier, name)
        if not result.success:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later.",
                headers={
                    "Retry-After": str(result.retry_after()),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def get_llm_service(session: AsyncSession = Depends(get_session)) -> LLMService:
    return LLMService(session=session)


def get_template_git_sync() -> BaseGitSyncService:
    return template_git_sync


def get_customer_git_sync() -> BaseGitSyncService:
    return customer_git_sync


def get_skill_git_sync() -> BaseGitSyncService:
    return skill_git_sync


def get_url_fetcher() -> Callable:
    """Coroutine used to download skill source URLs."""
    return fetch_url_content


SessionDep = Annotated[AsyncSession, Depends(get_session)]
UserDep = Annotated[CurrentUser, Depends(require_user)]
LLMServiceDep = Annotated[LLMService, Depends(get_llm_service)]
