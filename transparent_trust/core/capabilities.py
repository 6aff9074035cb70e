"""
Capability helpers.

Capabilities are the unit of authorization. Users receive them from their
role and from the SSO groups they belong to (see ``AuthGroupMapping``).
``ADMIN`` implies every other capability.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from transparent_trust.core.models.domain.enums import Capability

CAPABILITY_ORDER: List[Capability] = [
    Capability.ask_questions,
    Capability.create_projects,
    Capability.review_answers,
    Capability.manage_knowledge,
    Capability.manage_prompts,
    Capability.view_org_data,
    Capability.manage_users,
    Capability.admin,
]

CAPABILITY_INFO: Dict[Capability, Dict[str, str]] = {
    Capability.ask_questions: {
        "label": "Ask Questions",
        "description": "Use quick questions, chat, and view own question history",
    },
    Capability.create_projects: {
        "label": "Create Projects",
        "description": "Create and manage bulk projects, upload documents",
    },
    Capability.review_answers: {
        "label": "Review Answers",
        "description": "Verify, correct, and flag/resolve answers",
    },
    Capability.manage_knowledge: {
        "label": "Manage Knowledge",
        "description": "Create and edit skills, templates, and customer profiles",
    },
    Capability.manage_prompts: {
        "label": "Manage Prompts",
        "description": "Edit system prompts and approve shared instruction presets",
    },
    Capability.view_org_data: {
        "label": "View Org Data",
        "description": "See org-wide audit log and usage metrics",
    },
    Capability.manage_users: {
        "label": "Manage Users",
        "description": "Assign capabilities and manage SSO group mappings",
    },
    Capability.admin: {
        "label": "Admin",
        "description": "Full access including system settings and destructive actions",
    },
}

DEFAULT_GROUP_MAPPINGS: List[Dict[str, object]] = [
    {
        "group_id": "tt-users",
        "group_name": "Copilot Users",
        "capabilities": [Capability.ask_questions, Capability.create_projects],
    },
    {
        "group_id": "tt-reviewers",
        "group_name": "Copilot Reviewers",
        "capabilities": [
            Capability.ask_questions,
            Capability.create_projects,
            Capability.review_answers,
            Capability.view_org_data,
        ],
    },
    {
        "group_id": "tt-knowledge-admins",
        "group_name": "Knowledge Admins",
        "capabilities": [
            Capability.ask_questions,
            Capability.create_projects,
            Capability.review_answers,
            Capability.view_org_data,
            Capability.manage_knowledge,
        ],
    },
    {
        "group_id": "tt-prompt-admins",
        "group_name": "Prompt Admins",
        "capabilities": [Capability.ask_questions, Capability.create_projects, Capability.manage_prompts],
    },
    {
        "group_id": "tt-admins",
        "group_name": "Copilot Admins",
        "capabilities": list(CAPABILITY_ORDER),
    },
]


def _as_set(capabilities: Optional[Iterable[Capability | str]]) -> set[str]:
    return {Capability(c).value for c in capabilities or []}


def has_capability(user_capabilities: Optional[Iterable[Capability | str]], required: Capability) -> bool:
    caps = _as_set(user_capabilities)
    return Capability.admin.value in caps or required.value in caps


def has_any_capability(
    user_capabilities: Optional[Iterable[Capability | str]], required: Sequence[Capability]
) -> bool:
    caps = _as_set(user_capabilities)
    if Capability.admin.value in caps:
        return True
    return any(cap.value in caps for cap in required)


def has_all_capabilities(
    user_capabilities: Optional[Iterable[Capability | str]], required: Sequence[Capability]
) -> bool:
    caps = _as_set(user_capabilities)
    if Capability.admin.value in caps:
        return True
    return all(cap.value in caps for cap in required)


def can_review(user_capabilities: Optional[Iterable[Capability | str]]) -> bool:
    """Reviewers may act on answers and collateral owned by other users."""
    return has_any_capability(user_capabilities, (Capability.review_answers,))


def merge_capabilities(*capability_lists: Optional[Iterable[Capability | str]]) -> List[Capability]:
    """Union of the given lists, keeping first-seen order."""
    merged: List[Capability] = []
    for caps in capability_lists:
        for cap in caps or []:
            cap = Capability(cap)
            if cap not in merged:
                merged.append(cap)
    return merged


def role_to_capabilities(role: Optional[str]) -> List[Capability]:
    """Capabilities implied by a legacy role name."""
    if role == "ADMIN":
        return list(CAPABILITY_ORDER)
    if role == "PROMPT_ADMIN":
        return [Capability.ask_questions, Capability.create_projects, Capability.manage_prompts]
    return default_capabilities()


def default_capabilities() -> List[Capability]:
    return [Capability.ask_questions]


def is_valid_capability(value: str) -> bool:
    return value in {c.value for c in Capability}


def sort_capabilities(capabilities: Iterable[Capability | str]) -> List[Capability]:
    """Sort capabilities by their canonical order."""
    return sorted((Capability(c) for c in capabilities), key=CAPABILITY_ORDER.index)
