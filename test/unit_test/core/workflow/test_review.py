"""Unit tests for the review workflow state machine."""

from datetime import datetime

import pytest

from transparent_trust.core.database.entities.projects import BulkRow
from transparent_trust.core.models.domain import AuditAction, CurrentUser, ReviewStatus
from transparent_trust.core.workflow import (
    WorkflowError,
    apply_flag,
    apply_flag_resolution,
    apply_queue,
    apply_review_status,
    apply_workflow_changes,
    can_transition,
    next_stages,
    request_review,
    review_stage,
)

NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def user():
    return CurrentUser(id="u-1", email="dana@example.com", name="Dana")


@pytest.fixture
def reviewer():
    return CurrentUser(id="u-2", name="Reviewer")


@pytest.fixture
def row():
    return BulkRow(project_id="p-1", row_number=1, question="Do you support SSO?", response="Yes.")


class TestStages:
    def test_new_row_is_pending(self, row):
        assert review_stage(row) == "pending"

    def test_stage_precedence(self, row, user):
        apply_flag(row, True, user, now=NOW)
        assert review_stage(row) == "flagged"

        apply_queue(row, True, user, now=NOW)
        assert review_stage(row) == "queued"

        request_review(row, user, now=NOW)
        assert review_stage(row) == "requested"

    def test_resolved_flag_is_not_flagged_stage(self, row, user):
        apply_flag(row, True, user, now=NOW)
        apply_flag_resolution(row, True, user, now=NOW)
        assert review_stage(row) == "pending"

    @pytest.mark.parametrize(
        "from_stage,to_stage,allowed",
        [
            ("pending", "requested", True),
            ("queued", "requested", True),
            ("requested", "approved", True),
            ("approved", "requested", True),
            ("pending", "approved", True),
            ("queued", "flagged", False),
            ("requested", "flagged", False),
            ("unknown", "pending", False),
        ],
    )
    def test_can_transition(self, from_stage, to_stage, allowed):
        assert can_transition(from_stage, to_stage) is allowed

    def test_next_stages_follow_the_current_stage(self, row, user):
        assert "flagged" in next_stages(row)

        apply_review_status(row, ReviewStatus.approved, user, now=NOW)

        assert next_stages(row) == ["requested", "pending"]


class TestFlagging:
    def test_flag_sets_metadata(self, row, user):
        apply_flag(row, True, user, note="check numbers", now=NOW)

        assert row.flagged_for_review is True
        assert row.flagged_at == NOW
        assert row.flagged_by == "dana@example.com"
        assert row.flag_note == "check numbers"

    def test_reflagging_only_updates_note(self, row, user, reviewer):
        apply_flag(row, True, user, note="first", now=NOW)
        apply_flag(row, True, reviewer, note="second", now=datetime(2024, 6, 2))

        assert row.flagged_by == "dana@example.com"
        assert row.flagged_at == NOW
        assert row.flag_note == "second"

    def test_unflag_clears_flag(self, row, user):
        apply_flag(row, True, user, note="x", now=NOW)
        apply_flag(row, False, user)

        assert row.flagged_for_review is False
        assert row.flagged_at is None
        assert row.flagged_by is None
        assert row.flag_note is None

    def test_resolve_flag(self, row, user, reviewer):
        apply_flag(row, True, user, now=NOW)
        action = apply_flag_resolution(row, True, reviewer, note="fixed", now=NOW)

        assert action is AuditAction.flag_resolved
        assert row.flag_resolved is True
        assert row.flag_resolved_by == "Reviewer"
        assert row.flag_resolution_note == "fixed"

    def test_resolving_twice_is_not_audited_again(self, row, user):
        apply_flag(row, True, user, now=NOW)
        apply_flag_resolution(row, True, user, now=NOW)
        assert apply_flag_resolution(row, True, user, now=NOW) is None

    def test_resolving_unflagged_row_fails(self, row, user):
        with pytest.raises(WorkflowError):
            apply_flag_resolution(row, True, user)

    def test_reopen_flag(self, row, user):
        apply_flag(row, True, user, now=NOW)
        apply_flag_resolution(row, True, user, note="done", now=NOW)
        assert apply_flag_resolution(row, False, user) is None

        assert row.flag_resolved is False
        assert row.flag_resolved_at is None
        assert row.flag_resolution_note is None

    def test_reflag_after_resolution_reopens(self, row, user):
        apply_flag(row, True, user, now=NOW)
        apply_flag_resolution(row, True, user, now=NOW)
        apply_flag(row, False, user)
        apply_flag(row, True, user, now=NOW)

        assert row.flag_resolved is False
        assert row.flag_resolved_by is None


class TestQueueAndRequest:
    def test_queue_keeps_first_queued_by(self, row, user, reviewer):
        apply_queue(row, True, user, note="batch 1", reviewer_id="r-1", reviewer_name="Rae", now=NOW)
        apply_queue(row, True, reviewer, note="batch 2")

        assert row.queued_by == "dana@example.com"
        assert row.queued_note == "batch 2"
        assert row.queued_reviewer_id == "r-1"
        assert row.queued_reviewer_name == "Rae"

    def test_dequeue_clears_queue(self, row, user):
        apply_queue(row, True, user, note="x", reviewer_id="r-1", now=NOW)
        apply_queue(row, False, user)

        assert row.queued_for_review is False
        assert row.queued_at is None
        assert row.queued_reviewer_id is None

    def test_request_review_consumes_queue(self, row, user):
        apply_queue(row, True, user, reviewer_id="r-1", now=NOW)
        action = request_review(row, user, note="please check", reviewer_id="r-1", reviewer_name="Rae", now=NOW)

        assert action is AuditAction.review_requested
        assert row.review_status == ReviewStatus.requested.value
        assert row.review_requested_at == NOW
        assert row.review_requested_by == "dana@example.com"
        assert row.review_note == "please check"
        assert row.assigned_reviewer_id == "r-1"
        assert row.queued_for_review is False

    def test_request_review_clears_previous_outcome(self, row, user, reviewer):
        request_review(row, user, now=NOW)
        apply_review_status(row, ReviewStatus.approved, reviewer, now=NOW)
        request_review(row, user, now=NOW)

        assert row.reviewed_at is None
        assert row.reviewed_by is None


class TestReviewStatus:
    def test_approve(self, row, user, reviewer):
        request_review(row, user, now=NOW)
        action = apply_review_status(row, "APPROVED", reviewer, now=NOW)

        assert action is AuditAction.approved
        assert row.review_status == "APPROVED"
        assert row.reviewed_by == "Reviewer"
        assert row.reviewed_at == NOW

    def test_correct(self, row, user, reviewer):
        request_review(row, user, now=NOW)
        assert apply_review_status(row, ReviewStatus.corrected, reviewer, now=NOW) is AuditAction.corrected

    def test_repeated_request_is_not_audited(self, row, user):
        assert apply_review_status(row, ReviewStatus.requested, user, now=NOW) is AuditAction.review_requested
        assert apply_review_status(row, ReviewStatus.requested, user, now=NOW) is None

    def test_reset_to_none(self, row, user, reviewer):
        request_review(row, user, now=NOW)
        apply_review_status(row, ReviewStatus.approved, reviewer, now=NOW)

        assert apply_review_status(row, ReviewStatus.none, user) is None
        assert row.review_status == "NONE"
        assert row.review_requested_at is None
        assert row.reviewed_by is None

    def test_invalid_status(self, row, user):
        with pytest.raises(ValueError):
            apply_review_status(row, "MAYBE", user)


class TestApplyWorkflowChanges:
    def test_flag_then_request_in_one_patch(self, row, user):
        actions = apply_workflow_changes(
            row,
            {
                "flagged_for_review": True,
                "flag_note": "numbers look off",
                "review_status": "REQUESTED",
                "review_note": "please verify",
                "assigned_reviewer_id": "r-1",
            },
            user,
            now=NOW,
        )

        assert actions == [AuditAction.review_requested]
        assert row.flag_note == "numbers look off"
        assert row.review_note == "please verify"
        assert row.assigned_reviewer_id == "r-1"

    def test_resolve_flag_and_approve(self, row, user, reviewer):
        apply_flag(row, True, user, now=NOW)
        request_review(row, user, now=NOW)

        actions = apply_workflow_changes(
            row,
            {"flag_resolved": True, "flag_resolution_note": "ok", "review_status": "APPROVED"},
            reviewer,
            now=NOW,
        )

        assert actions == [AuditAction.flag_resolved, AuditAction.approved]

    def test_note_only_changes(self, row, user):
        actions = apply_workflow_changes(row, {"flag_note": "just a note", "queued_note": "later"}, user)

        assert actions == []
        assert row.flag_note == "just a note"
        assert row.queued_note == "later"
        assert row.flagged_for_review is False

    def test_invalid_resolution_raises(self, row, user):
        with pytest.raises(WorkflowError):
            apply_workflow_changes(row, {"flag_resolved": True}, user)

    def test_empty_changes(self, row, user):
        assert apply_workflow_changes(row, {}, user) == []
        assert review_stage(row) == "pending"
