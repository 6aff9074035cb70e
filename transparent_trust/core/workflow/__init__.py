"""Human review workflow shared by bulk rows and collateral outputs."""

from .review import (
    ROW_REVIEW_TRANSITIONS,
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

__all__ = [
    "ROW_REVIEW_TRANSITIONS",
    "WorkflowError",
    "apply_flag",
    "apply_flag_resolution",
    "apply_queue",
    "apply_review_status",
    "apply_workflow_changes",
    "can_transition",
    "next_stages",
    "request_review",
    "review_stage",
]
