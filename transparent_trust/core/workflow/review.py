"""
Review workflow state machine.

Bulk project rows and collateral outputs share the same human-in-the-loop
workflow: an item can be flagged (a note to self), queued (staged for a
batched review request), sent for review and finally approved or
corrected. The functions here mutate a record carrying
``ReviewableFields`` in place and return the audit action the caller
should record, if any. They never touch the database.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from transparent_trust.core.database.base import utc_now
from transparent_trust.core.database.entities.reviewable import ReviewableFields
from transparent_trust.core.models.domain import AuditAction, CurrentUser, ReviewStatus

# Workflow stage -> stages the row endpoints can move it to. Approval needs no prior request.
ROW_REVIEW_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    "pending": ("flagged", "queued", "requested", "approved", "corrected"),
    "flagged": ("pending", "queued", "requested", "approved", "corrected"),
    "queued": ("pending", "requested", "approved", "corrected"),
    "requested": ("approved", "corrected", "pending"),
    "approved": ("requested", "pending"),
    "corrected": ("requested", "pending"),
}


class WorkflowError(ValueError):
    """Raised when a workflow change is not valid for the record's state."""


def review_stage(record: ReviewableFields) -> str:
    """Collapse the workflow columns of a record into a single stage name."""
    status = ReviewStatus(record.review_status or ReviewStatus.none.value)
    if status is ReviewStatus.approved:
        return "approved"
    if status is ReviewStatus.corrected:
        return "corrected"
    if status is ReviewStatus.requested:
        return "requested"
    if record.queued_for_review:
        return "queued"
    if record.flagged_for_review and not record.flag_resolved:
        return "flagged"
    return "pending"


def can_transition(from_stage: str, to_stage: str) -> bool:
    return to_stage in ROW_REVIEW_TRANSITIONS.get(from_stage, ())


def next_stages(record: ReviewableFields) -> List[str]:
    return list(ROW_REVIEW_TRANSITIONS.get(review_stage(record), ()))


def apply_flag(
    record: ReviewableFields,
    flagged: bool,
    user: CurrentUser,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """Flag or unflag a record. Flagging an already flagged record only updates the note."""
    now = now or utc_now()
    if flagged:
        if not record.flagged_for_review:
            record.flagged_for_review = True
            record.flagged_at = now
            record.flagged_by = user.label
            record.flag_resolved = False
            record.flag_resolved_at = None
            record.flag_resolved_by = None
            record.flag_resolution_note = None
        if note is not None:
            record.flag_note = note
        return

    record.flagged_for_review = False
    record.flagged_at = None
    record.flagged_by = None
    record.flag_note = None


def apply_flag_resolution(
    record: ReviewableFields,
    resolved: bool,
    user: CurrentUser,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[AuditAction]:
    """
    Resolve or reopen a flag.

    Returns:
        ``AuditAction.flag_resolved`` when an open flag was resolved.

    Raises:
        WorkflowError: When resolving a record that was never flagged.
    """
    now = now or utc_now()
    if resolved:
        if not record.flagged_for_review:
            raise WorkflowError("Cannot resolve a flag on an item that is not flagged")
        if note is not None:
            record.flag_resolution_note = note
        if record.flag_resolved:
            return None
        record.flag_resolved = True
        record.flag_resolved_at = now
        record.flag_resolved_by = user.label
        return AuditAction.flag_resolved

    if record.flag_resolved:
        record.flag_resolved = False
        record.flag_resolved_at = None
        record.flag_resolved_by = None
        record.flag_resolution_note = None
    return None


def _clear_queue(record: ReviewableFields) -> None:
    record.queued_for_review = False
    record.queued_at = None
    record.queued_by = None
    record.queued_note = None
    record.queued_reviewer_id = None
    record.queued_reviewer_name = None


def apply_queue(
    record: ReviewableFields,
    queued: bool,
    user: CurrentUser,
    note: Optional[str] = None,
    reviewer_id: Optional[str] = None,
    reviewer_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """Stage a record for a later review request, or take it off the queue."""
    if not queued:
        _clear_queue(record)
        return

    if not record.queued_for_review:
        record.queued_for_review = True
        record.queued_at = now or utc_now()
        record.queued_by = user.label
    if note is not None:
        record.queued_note = note
    if reviewer_id is not None:
        record.queued_reviewer_id = reviewer_id
    if reviewer_name is not None:
        record.queued_reviewer_name = reviewer_name


def request_review(
    record: ReviewableFields,
    user: CurrentUser,
    note: Optional[str] = None,
    reviewer_id: Optional[str] = None,
    reviewer_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AuditAction:
    """Send a record for review. Any queued state is consumed."""
    record.review_status = ReviewStatus.requested.value
    record.review_requested_at = now or utc_now()
    record.review_requested_by = user.label
    record.review_note = note or None
    record.assigned_reviewer_id = reviewer_id or None
    record.assigned_reviewer_name = reviewer_name or None
    record.reviewed_at = None
    record.reviewed_by = None
    _clear_queue(record)
    return AuditAction.review_requested


def apply_review_status(
    record: ReviewableFields,
    status: ReviewStatus | str,
    user: CurrentUser,
    now: Optional[datetime] = None,
) -> Optional[AuditAction]:
    """
    Move a record to ``status``.

    Returns:
        The audit action for the change, or None when nothing needs
        auditing (a reset, or a repeated review request).
    """
    status = ReviewStatus(status)
    now = now or utc_now()

    if status is ReviewStatus.requested:
        if record.review_status == ReviewStatus.requested.value:
            return None
        return request_review(
            record,
            user,
            note=record.review_note,
            reviewer_id=record.assigned_reviewer_id,
            reviewer_name=record.assigned_reviewer_name,
            now=now,
        )

    if status in (ReviewStatus.approved, ReviewStatus.corrected):
        record.review_status = status.value
        record.reviewed_at = now
        record.reviewed_by = user.label
        return AuditAction.approved if status is ReviewStatus.approved else AuditAction.corrected

    record.review_status = ReviewStatus.none.value
    record.review_requested_at = None
    record.review_requested_by = None
    record.reviewed_at = None
    record.reviewed_by = None
    return None


def apply_workflow_changes(
    record: ReviewableFields,
    changes: Mapping[str, Any],
    user: CurrentUser,
    now: Optional[datetime] = None,
) -> List[AuditAction]:
    """
    Apply the workflow fields of a PATCH body.

    Changes are applied in workflow order: flag, flag resolution, queue,
    review request details, then review status. Keys absent from
    ``changes`` are left alone.

    Returns:
        Audit actions produced by the changes, in order.

    Raises:
        WorkflowError: A change is not valid for the record's state.
    """
    now = now or utc_now()
    actions: List[AuditAction] = []

    if changes.get("flagged_for_review") is not None:
        apply_flag(record, changes["flagged_for_review"], user, note=changes.get("flag_note"), now=now)
    elif "flag_note" in changes:
        record.flag_note = changes["flag_note"]

    if changes.get("flag_resolved") is not None:
        action = apply_flag_resolution(
            record, changes["flag_resolved"], user, note=changes.get("flag_resolution_note"), now=now
        )
        if action:
            actions.append(action)
    elif "flag_resolution_note" in changes:
        record.flag_resolution_note = changes["flag_resolution_note"]

    if changes.get("queued_for_review") is not None:
        apply_queue(
            record,
            changes["queued_for_review"],
            user,
            note=changes.get("queued_note"),
            reviewer_id=changes.get("queued_reviewer_id"),
            reviewer_name=changes.get("queued_reviewer_name"),
            now=now,
        )
    else:
        for key in ("queued_note", "queued_reviewer_id", "queued_reviewer_name"):
            if key in changes:
                setattr(record, key, changes[key])

    for key in ("review_note", "assigned_reviewer_id", "assigned_reviewer_name"):
        if key in changes:
            setattr(record, key, changes[key])

    if changes.get("review_status") is not None:
        action = apply_review_status(record, changes["review_status"], user, now=now)
        if action:
            actions.append(action)

    return actions
