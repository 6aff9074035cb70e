"""Domain enums for Transparent Trust models."""

from __future__ import annotations

from enum import Enum


class Capability(str, Enum):
    """
    Fine-grained permission granted to a user.

    Capabilities are derived from SSO group mappings. ``admin`` implies
    every other capability.
    """

    ask_questions = "ASK_QUESTIONS"  # Quick questions, chat, own history.
    create_projects = "CREATE_PROJECTS"  # Bulk projects and document uploads.
    review_answers = "REVIEW_ANSWERS"  # Verify, correct, flag and resolve answers.
    manage_knowledge = "MANAGE_KNOWLEDGE"  # Skills, templates, customer profiles.
    manage_prompts = "MANAGE_PROMPTS"  # Prompt blocks and shared instruction presets.
    view_org_data = "VIEW_ORG_DATA"  # Org-wide logs and metrics.
    manage_users = "MANAGE_USERS"  # Capabilities and SSO group mappings.
    admin = "ADMIN"


class AuditEntityType(str, Enum):
    """Kind of record an audit log entry refers to."""

    skill = "SKILL"
    customer = "CUSTOMER"
    project = "PROJECT"
    document = "DOCUMENT"
    reference_url = "REFERENCE_URL"
    contract = "CONTRACT"
    user = "USER"
    setting = "SETTING"
    prompt = "PROMPT"
    context_snippet = "CONTEXT_SNIPPET"
    answer = "ANSWER"
    template = "TEMPLATE"
    collateral = "COLLATERAL"


class AuditAction(str, Enum):
    """Action recorded in the audit log."""

    created = "CREATED"
    updated = "UPDATED"
    deleted = "DELETED"
    viewed = "VIEWED"
    exported = "EXPORTED"
    owner_added = "OWNER_ADDED"
    owner_removed = "OWNER_REMOVED"
    status_changed = "STATUS_CHANGED"
    refreshed = "REFRESHED"
    merged = "MERGED"
    corrected = "CORRECTED"
    approved = "APPROVED"
    review_requested = "REVIEW_REQUESTED"
    flag_resolved = "FLAG_RESOLVED"
    clarify_used = "CLARIFY_USED"


class OutputFormat(str, Enum):
    """Output document format of a template."""

    markdown = "markdown"
    docx = "docx"
    pdf = "pdf"


class ShareStatus(str, Enum):
    """Sharing lifecycle of an instruction preset."""

    private = "PRIVATE"
    pending_approval = "PENDING_APPROVAL"
    approved = "APPROVED"
    rejected = "REJECTED"


class CollateralStatus(str, Enum):
    """Lifecycle status of a generated collateral output."""

    draft = "DRAFT"
    generated = "GENERATED"
    exported = "EXPORTED"
    needs_review = "NEEDS_REVIEW"
    approved = "APPROVED"
    finalized = "FINALIZED"


class ReviewStatus(str, Enum):
    """Human review state of an answer or collateral output."""

    none = "NONE"
    requested = "REQUESTED"
    approved = "APPROVED"
    corrected = "CORRECTED"


class FeedbackRating(str, Enum):
    thumbs_up = "THUMBS_UP"
    thumbs_down = "THUMBS_DOWN"


class SkillStatus(str, Enum):
    """Publication status of a skill."""

    draft = "DRAFT"
    in_review = "IN_REVIEW"
    published = "PUBLISHED"
    archived = "ARCHIVED"


class ProjectStatus(str, Enum):
    """Lifecycle status of a bulk RFP project."""

    draft = "DRAFT"
    in_progress = "IN_PROGRESS"
    needs_review = "NEEDS_REVIEW"
    finalized = "FINALIZED"


class RowStatus(str, Enum):
    """Answer generation status of a bulk project row."""

    pending = "PENDING"
    completed = "COMPLETED"
    error = "ERROR"


class SyncStatus(str, Enum):
    """Outcome of the last git mirror write for an entity."""

    pending = "PENDING"
    synced = "SYNCED"
    failed = "FAILED"


class HistoryAction(str, Enum):
    """Action recorded in a skill or customer history entry."""

    created = "created"
    updated = "updated"
    refreshed = "refreshed"
    merged = "merged"
